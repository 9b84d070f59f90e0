from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional, Sequence, Tuple, Union

from .errors import InvalidWorkloadError
from .models import AllocationPolicy, AllocationResult, FragmentationReport, MemoryBlock

logger = logging.getLogger(__name__)


def parse_policy(name: Union[str, AllocationPolicy]) -> AllocationPolicy:
    try:
        return AllocationPolicy(str(getattr(name, "value", name)).lower())
    except ValueError:
        valid = ", ".join(p.value for p in AllocationPolicy)
        raise ValueError(f"Unknown allocation policy '{name}' (choose from {valid})") from None


def create_blocks(sizes: Iterable[int]) -> Tuple[MemoryBlock, ...]:
    """
    Build a fresh partition table of free blocks with ids 0..n-1.
    """
    blocks = tuple(MemoryBlock(block_id=idx, size=size) for idx, size in enumerate(sizes))
    for block in blocks:
        if block.size <= 0:
            raise InvalidWorkloadError(f"Block {block.block_id} must have a positive size")
    return blocks


def add_block(blocks: Sequence[MemoryBlock], size: int) -> Tuple[MemoryBlock, ...]:
    """
    Append a free block whose id is one past the highest id in use (0 if empty).
    """
    if size <= 0:
        raise InvalidWorkloadError("Block size must be positive")
    next_id = max((b.block_id for b in blocks), default=-1) + 1
    logger.debug("added block %d (%d)", next_id, size)
    return tuple(blocks) + (MemoryBlock(block_id=next_id, size=size),)


def _select_block(blocks: Sequence[MemoryBlock], size: int, policy: AllocationPolicy) -> Optional[int]:
    """
    Return the index of the block chosen by the policy, or None.

    Candidates are scanned in block order and only a strictly better leftover
    replaces the current pick, so ties go to the earliest block.
    """
    selected: Optional[int] = None
    best_leftover: Optional[int] = None

    for idx, block in enumerate(blocks):
        if block.allocated or block.size < size:
            continue
        leftover = block.size - size

        if policy is AllocationPolicy.FIRST_FIT:
            return idx
        if best_leftover is None:
            selected, best_leftover = idx, leftover
        elif policy is AllocationPolicy.BEST_FIT and leftover < best_leftover:
            selected, best_leftover = idx, leftover
        elif policy is AllocationPolicy.WORST_FIT and leftover > best_leftover:
            selected, best_leftover = idx, leftover

    return selected


def allocate(
    blocks: Sequence[MemoryBlock],
    tenant: str,
    size: int,
    policy: Union[str, AllocationPolicy],
) -> AllocationResult:
    """
    Place a tenant of the given size into one free block.

    Failure (blank name, name already resident, non-positive size, nothing
    fits) is reported in the result; the returned blocks are then unchanged.
    """
    policy = parse_policy(policy)
    blocks = tuple(blocks)

    def fail(message: str) -> AllocationResult:
        logger.info("allocation failed: %s", message)
        return AllocationResult(blocks=blocks, success=False, message=message)

    tenant = tenant.strip() if tenant else ""
    if not tenant:
        return fail("Process name is required")
    if any(b.tenant == tenant for b in blocks):
        return fail(f'Process "{tenant}" is already in memory')
    if size <= 0:
        return fail(f"Invalid size {size} for {tenant}; size must be positive")

    idx = _select_block(blocks, size, policy)
    if idx is None:
        return fail(f"No suitable block found for {tenant} ({size}KB) using {policy.value}")

    chosen = blocks[idx]
    updated = replace(chosen, tenant=tenant, tenant_size=size)
    new_blocks = blocks[:idx] + (updated,) + blocks[idx + 1:]

    logger.debug("%s: %s (%d) -> block %d, leftover %d", policy.value, tenant, size, chosen.block_id, updated.internal_fragmentation)
    return AllocationResult(
        blocks=new_blocks,
        success=True,
        message=f"{tenant} ({size}KB) allocated to Block {chosen.block_id} ({chosen.size}KB)",
        block_id=chosen.block_id,
    )


def deallocate(blocks: Sequence[MemoryBlock], tenant: str) -> AllocationResult:
    """
    Free the block holding the named tenant.
    """
    blocks = tuple(blocks)
    tenant = tenant.strip() if tenant else ""
    for idx, block in enumerate(blocks):
        if block.allocated and block.tenant == tenant:
            freed = replace(block, tenant=None, tenant_size=None)
            return AllocationResult(
                blocks=blocks[:idx] + (freed,) + blocks[idx + 1:],
                success=True,
                message=f"{tenant} deallocated from Block {block.block_id}",
                block_id=block.block_id,
            )

    message = f'Process "{tenant}" not found in memory'
    logger.info("deallocation failed: %s", message)
    return AllocationResult(blocks=blocks, success=False, message=message)


def fragmentation(blocks: Iterable[MemoryBlock]) -> FragmentationReport:
    """
    Summarize memory usage.

    ``total_allocated_memory`` counts tenant sizes only and
    ``total_free_memory`` counts wholly free blocks only, so the slack inside
    allocated blocks is in neither; it is reported as internal fragmentation.
    Free partitions never merge, so all free memory is also external
    fragmentation.
    """
    blocks = list(blocks)
    internal = sum(b.internal_fragmentation for b in blocks if b.allocated)
    free = sum(b.size for b in blocks if not b.allocated)
    allocated = sum(b.tenant_size for b in blocks if b.allocated)
    total = sum(b.size for b in blocks)

    return FragmentationReport(
        internal_fragmentation=internal,
        external_fragmentation=free,
        total_free_memory=free,
        total_allocated_memory=allocated,
        total_memory=total,
        utilization_percentage=(allocated / total) * 100 if total > 0 else 0.0,
    )
