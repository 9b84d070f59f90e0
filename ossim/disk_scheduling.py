"""
Disk-head seek scheduling.

Given the pending cylinder requests and the current head position, each policy
decides the order in which the head visits them:

- FCFS: input order.
- SSTF: always the nearest remaining request.
- SCAN: sweep in the chosen direction to the edge of the disk, then reverse.
- LOOK: like SCAN, but reverse right after the last request on the way.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Sequence, Union

from .errors import InvalidWorkloadError
from .models import Direction, DiskPolicy, DiskRequest, DiskSchedulingResult, SeekOperation

logger = logging.getLogger(__name__)


class _HeadTrace:
    """Accumulates the visited sequence and the seek for each hop."""

    def __init__(self, head: int) -> None:
        self.position = head
        self.sequence: List[int] = [head]
        self.operations: List[SeekOperation] = []

    def move_to(self, cylinder: int, boundary: bool = False) -> None:
        seek = abs(cylinder - self.position)
        self.operations.append(
            SeekOperation(from_cylinder=self.position, to_cylinder=cylinder, seek=seek, boundary=boundary)
        )
        self.sequence.append(cylinder)
        logger.debug("head %d -> %d (%d)%s", self.position, cylinder, seek, " [edge]" if boundary else "")
        self.position = cylinder

    def visit_all(self, cylinders: Sequence[int]) -> None:
        for cylinder in cylinders:
            self.move_to(cylinder)


def _split(cylinders: Sequence[int], head: int) -> tuple[List[int], List[int]]:
    """
    Split into requests below the head (nearest first, descending) and at or
    above it (ascending).
    """
    below = sorted((c for c in cylinders if c < head), reverse=True)
    above = sorted(c for c in cylinders if c >= head)
    return below, above


def _fcfs(trace: _HeadTrace, cylinders: Sequence[int], max_cylinder: int, direction: Direction) -> None:
    trace.visit_all(cylinders)


def _sstf(trace: _HeadTrace, cylinders: Sequence[int], max_cylinder: int, direction: Direction) -> None:
    remaining = list(cylinders)
    while remaining:
        # min() keeps the first of equally near requests.
        nearest = min(range(len(remaining)), key=lambda i: abs(remaining[i] - trace.position))
        trace.move_to(remaining.pop(nearest))


def _scan(trace: _HeadTrace, cylinders: Sequence[int], max_cylinder: int, direction: Direction) -> None:
    below, above = _split(cylinders, trace.position)

    if direction is Direction.RIGHT:
        trace.visit_all(above)
        if below:
            if trace.position != max_cylinder:
                trace.move_to(max_cylinder, boundary=True)
            trace.visit_all(below)
    else:
        trace.visit_all(below)
        if above:
            if trace.position != 0:
                trace.move_to(0, boundary=True)
            trace.visit_all(above)


def _look(trace: _HeadTrace, cylinders: Sequence[int], max_cylinder: int, direction: Direction) -> None:
    below, above = _split(cylinders, trace.position)

    if direction is Direction.RIGHT:
        trace.visit_all(above)
        trace.visit_all(below)
    else:
        trace.visit_all(below)
        trace.visit_all(above)


POLICIES: Dict[DiskPolicy, Callable[[_HeadTrace, Sequence[int], int, Direction], None]] = {
    DiskPolicy.FCFS: _fcfs,
    DiskPolicy.SSTF: _sstf,
    DiskPolicy.SCAN: _scan,
    DiskPolicy.LOOK: _look,
}


def parse_policy(name: Union[str, DiskPolicy]) -> DiskPolicy:
    try:
        return DiskPolicy(str(getattr(name, "value", name)).lower())
    except ValueError:
        valid = ", ".join(p.value for p in DiskPolicy)
        raise ValueError(f"Unknown disk scheduling policy '{name}' (choose from {valid})") from None


def parse_direction(name: Union[str, Direction]) -> Direction:
    try:
        return Direction(str(getattr(name, "value", name)).lower())
    except ValueError:
        raise ValueError(f"Unknown direction '{name}' (choose from left, right)") from None


def next_request_id(requests: Sequence[DiskRequest]) -> int:
    return max((r.request_id for r in requests), default=0) + 1


def make_requests(cylinders: Sequence[int]) -> List[DiskRequest]:
    """
    Wrap bare cylinder numbers as requests with ids 1..n.
    """
    return [DiskRequest(request_id=idx, cylinder=c) for idx, c in enumerate(cylinders, start=1)]


def schedule(
    requests: Sequence[DiskRequest],
    head_position: int,
    policy: Union[str, DiskPolicy],
    max_cylinder: int = 199,
    direction: Union[str, Direction] = Direction.RIGHT,
) -> DiskSchedulingResult:
    """
    Compute the order in which the head services the pending requests.

    ``direction`` only matters for SCAN and LOOK. SCAN's trip to the disk edge
    is recorded as its own seek operation flagged ``boundary=True``, so when
    that hop happens the result carries one more seek operation (and one more
    ``sequence`` entry) than there are requests. Every other policy emits
    exactly one seek per request.
    """
    policy = parse_policy(policy)
    direction = parse_direction(direction)

    if max_cylinder < 0:
        raise InvalidWorkloadError("max_cylinder must not be negative")
    if not 0 <= head_position <= max_cylinder:
        raise InvalidWorkloadError(f"Head position {head_position} is outside [0, {max_cylinder}]")
    for r in requests:
        if not 0 <= r.cylinder <= max_cylinder:
            raise InvalidWorkloadError(f"Request {r.request_id} cylinder {r.cylinder} is outside [0, {max_cylinder}]")

    if not requests:
        return DiskSchedulingResult(
            policy=policy,
            head_position=head_position,
            sequence=(head_position,),
            success=False,
            message="No requests to schedule",
        )

    trace = _HeadTrace(head_position)
    POLICIES[policy](trace, [r.cylinder for r in requests], max_cylinder, direction)

    total = sum(op.seek for op in trace.operations)
    return DiskSchedulingResult(
        policy=policy,
        head_position=head_position,
        sequence=tuple(trace.sequence),
        seek_operations=tuple(trace.operations),
        total_seek_time=total,
        message=f"{len(requests)} requests serviced with total head movement {total}",
    )
