from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import config
from .colors import IDLE_COLOR, color_map
from .cpu_scheduling import compare, schedule as schedule_cpu
from .disk_scheduling import make_requests, schedule as schedule_disk
from .gantt import build_rich_gantt
from .memory_allocation import add_block, allocate, create_blocks, deallocate, fragmentation
from .models import AllocationPolicy, Direction, DiskPolicy, DiskSchedulingResult, MemoryBlock, SchedulingResult
from .workload_io import load_blocks, load_disk_requests, load_workload, parse_int_list

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ossim",
        description="Operating-system resource simulator: CPU scheduling, memory allocation and disk scheduling.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    cpu_parser = subparsers.add_parser("cpu", help="Run a CPU scheduling policy on a workload file.")
    cpu_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Policy to use (fcfs, sjf-np, sjf-p, priority-np, priority-p, round-robin).",
    )
    cpu_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    cpu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=config.DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {config.DEFAULT_QUANTUM}).",
    )
    cpu_parser.add_argument(
        "--step",
        action="store_true",
        help="Replay the computed schedule one time unit at a time.",
    )
    cpu_parser.add_argument(
        "--step-delay",
        type=float,
        default=config.DEFAULT_STEP_DELAY,
        help=f"Seconds to wait between steps when --step is used (default: {config.DEFAULT_STEP_DELAY}).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple CPU policies on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=config.DEFAULT_COMPARE_POLICIES,
        help="Policies to compare (default: all).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=config.DEFAULT_QUANTUM,
        help=f"Time quantum used for round-robin when included (default: {config.DEFAULT_QUANTUM}).",
    )

    memory_parser = subparsers.add_parser(
        "memory",
        help="Apply allocation operations to a fixed-partition memory and report fragmentation.",
    )
    memory_source = memory_parser.add_mutually_exclusive_group()
    memory_source.add_argument(
        "--blocks",
        "-b",
        type=parse_int_list,
        default=list(config.DEFAULT_BLOCK_SIZES),
        help="Comma-separated partition sizes (default: %s)." % ",".join(map(str, config.DEFAULT_BLOCK_SIZES)),
    )
    memory_source.add_argument(
        "--blocks-file",
        help="JSON or CSV file of partition sizes.",
    )
    memory_parser.add_argument(
        "--policy",
        "-p",
        choices=[p.value for p in AllocationPolicy],
        default=config.DEFAULT_ALLOCATION_POLICY,
        help=f"Placement policy (default: {config.DEFAULT_ALLOCATION_POLICY}).",
    )
    memory_parser.add_argument(
        "--op",
        "-o",
        action="append",
        type=parse_memory_op,
        default=[],
        help="Operation, applied in order: alloc:NAME:SIZE, free:NAME or add:SIZE. Repeatable.",
    )

    disk_parser = subparsers.add_parser("disk", help="Compute a disk-head seek order.")
    disk_source = disk_parser.add_mutually_exclusive_group(required=True)
    disk_source.add_argument(
        "--requests",
        "-r",
        type=parse_int_list,
        help="Comma-separated cylinder numbers, in arrival order.",
    )
    disk_source.add_argument(
        "--workload",
        "-w",
        help="JSON or CSV file of cylinder requests.",
    )
    disk_parser.add_argument(
        "--head",
        type=int,
        default=config.DEFAULT_HEAD_POSITION,
        help=f"Initial head position (default: {config.DEFAULT_HEAD_POSITION}).",
    )
    disk_parser.add_argument(
        "--policy",
        "-p",
        choices=[p.value for p in DiskPolicy],
        default=config.DEFAULT_DISK_POLICY,
        help=f"Seek policy (default: {config.DEFAULT_DISK_POLICY}).",
    )
    disk_parser.add_argument(
        "--max-cylinder",
        type=int,
        default=config.DEFAULT_MAX_CYLINDER,
        help=f"Highest cylinder number (default: {config.DEFAULT_MAX_CYLINDER}).",
    )
    disk_parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        default=config.DEFAULT_DIRECTION,
        help="Initial sweep direction for scan/look (default: right).",
    )
    disk_parser.add_argument(
        "--step",
        action="store_true",
        help="Replay the head movement one seek at a time.",
    )
    disk_parser.add_argument(
        "--step-delay",
        type=float,
        default=config.DEFAULT_STEP_DELAY,
        help=f"Seconds to wait between steps when --step is used (default: {config.DEFAULT_STEP_DELAY}).",
    )

    return parser


def parse_memory_op(text: str) -> Tuple[str, ...]:
    """
    Parse one --op value into ("alloc", name, size), ("free", name) or ("add", size).
    """
    parts = text.split(":")
    kind = parts[0].lower()
    try:
        if kind == "alloc" and len(parts) == 3:
            return ("alloc", parts[1], int(parts[2]))
        if kind == "free" and len(parts) == 2:
            return ("free", parts[1])
        if kind == "add" and len(parts) == 2:
            return ("add", int(parts[1]))
    except ValueError:
        pass
    raise argparse.ArgumentTypeError(f"invalid operation {text!r} (use alloc:NAME:SIZE, free:NAME or add:SIZE)")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _print_result(result: SchedulingResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.policy.value}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    colors = color_map(p.pid for p in result.processes)
    for p in result.processes:
        proc_table.add_row(
            f"[{colors[p.pid]}]{p.pid}[/]",
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.avg_waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{result.avg_response:.2f}")
    sys_table.add_row("Makespan", str(result.makespan))
    sys_table.add_row("Idle time", str(result.idle_time))
    sys_table.add_row("Throughput (proc/time)", f"{result.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{result.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _print_comparison(results: Sequence[SchedulingResult], console: Console, title: str = "Algorithm comparison") -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("CPU util.", justify="right")

    for result in results:
        summary_table.add_row(
            result.policy.value,
            "" if result.quantum is None else str(result.quantum),
            f"{result.avg_waiting:.2f}",
            f"{result.avg_turnaround:.2f}",
            f"{result.avg_response:.2f}",
            f"{result.cpu_utilization*100:.1f}%",
        )

    console.print(summary_table)


def _animate_result(result: SchedulingResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual replay of the computed schedule.
    """
    if not result.timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    colors = color_map(p.pid for p in result.processes)
    console.print(f"[bold]Simulating {result.policy.value}[/bold] (duration {result.makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for block in result.timeline:
        color = IDLE_COLOR if block.is_idle else colors[block.pid]
        for t in range(block.start_time, block.end_time):
            bar = f"[{color}]{'█' * (t - block.start_time + 1)}[/]"
            console.print(f"t={t:2d}: " + ("[dim]idle[/dim]" if block.is_idle else block.pid) + " " + bar)
            time.sleep(delay)


def _print_memory(blocks: Sequence[MemoryBlock], console: Console) -> None:
    table = Table(title="Memory blocks", box=box.SIMPLE_HEAVY)
    table.add_column("Block", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Process", justify="center")
    table.add_column("Used", justify="right")
    table.add_column("Internal frag.", justify="right")

    for block in blocks:
        if block.allocated:
            table.add_row(
                str(block.block_id),
                str(block.size),
                "[red]allocated[/red]",
                block.tenant,
                str(block.tenant_size),
                str(block.internal_fragmentation),
            )
        else:
            table.add_row(str(block.block_id), str(block.size), "[green]free[/green]", "", "", "")

    console.print(table)

    report = fragmentation(blocks)
    frag_table = Table(title="Fragmentation", box=box.SIMPLE_HEAVY)
    frag_table.add_column("Metric")
    frag_table.add_column("Value", justify="right")
    frag_table.add_row("Total memory", f"{report.total_memory}KB")
    frag_table.add_row("Allocated", f"{report.total_allocated_memory}KB")
    frag_table.add_row("Free (external frag.)", f"{report.total_free_memory}KB")
    frag_table.add_row("Internal fragmentation", f"{report.internal_fragmentation}KB")
    frag_table.add_row("Utilization", f"{report.utilization_percentage:.1f}%")
    console.print(frag_table)


def _run_memory(blocks: Tuple[MemoryBlock, ...], policy: str, ops: Sequence[Tuple], console: Console) -> Tuple[MemoryBlock, ...]:
    for op in ops:
        if op[0] == "add":
            blocks = add_block(blocks, op[1])
            console.print(f"[green]Block {blocks[-1].block_id} ({op[1]}KB) added[/green]")
            continue

        if op[0] == "alloc":
            outcome = allocate(blocks, op[1], op[2], policy)
        else:
            outcome = deallocate(blocks, op[1])
        style = "green" if outcome.success else "red"
        console.print(f"[{style}]{outcome.message}[/{style}]")
        blocks = outcome.blocks

    _print_memory(blocks, console)
    return blocks


def _print_disk(result: DiskSchedulingResult, console: Console) -> None:
    if not result.success:
        console.print(f"[yellow]{result.message}[/yellow]")
        return

    console.print(f"[bold]Algorithm:[/bold] {result.policy.value}")
    console.print(f"[bold]Seek sequence:[/bold] {' -> '.join(str(c) for c in result.sequence)}")
    console.print()

    table = Table(title="Seek operations", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right")
    table.add_column("From", justify="right")
    table.add_column("To", justify="right")
    table.add_column("Seek", justify="right")
    for idx, op in enumerate(result.seek_operations, start=1):
        to = f"{op.to_cylinder} [dim](edge)[/dim]" if op.boundary else str(op.to_cylinder)
        table.add_row(str(idx), str(op.from_cylinder), to, str(op.seek))
    console.print(table)

    console.print(f"[bold]Total seek time:[/bold] {result.total_seek_time}")
    console.print(f"[bold]Average seek:[/bold] {result.average_seek_time:.2f}")


def _animate_disk(result: DiskSchedulingResult, max_cylinder: int, delay: float, console: Console, width: int = 40) -> None:
    """
    Replay the head movement of a finished result, one seek per step.
    """
    scale = width / max(1, max_cylinder)
    travelled = 0
    for step, op in enumerate(result.seek_operations, start=1):
        travelled += op.seek
        pos = int(op.to_cylinder * scale)
        track = "-" * pos + "[bold cyan]●[/bold cyan]" + "-" * (width - pos)
        console.print(f"{step:2d}: {track} {op.from_cylinder:>4} -> {op.to_cylinder:<4} (total {travelled})")
        time.sleep(delay)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "cpu":
            processes = load_workload(Path(args.workload))
            result = schedule_cpu(processes, args.algorithm, quantum=args.quantum)
            if args.step:
                try:
                    _animate_result(result, args.step_delay, console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console)
            return 0

        if args.command == "compare":
            processes = load_workload(Path(args.workload))
            results = compare(processes, args.algorithms, quantum=args.quantum)
            _print_comparison(results, console, title=f"Algorithm comparison: {args.workload}")
            return 0

        if args.command == "memory":
            blocks = load_blocks(args.blocks_file) if args.blocks_file else create_blocks(args.blocks)
            _run_memory(blocks, args.policy, args.op, console)
            return 0

        if args.command == "disk":
            if args.workload:
                requests = load_disk_requests(args.workload)
            else:
                requests = make_requests(args.requests)
            result = schedule_disk(requests, args.head, args.policy, args.max_cylinder, args.direction)
            if args.step and result.success:
                try:
                    _animate_disk(result, args.max_cylinder, args.step_delay, console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_disk(result, console)
            return 0
    except (OSError, ValueError) as exc:
        logger.debug("command failed", exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
