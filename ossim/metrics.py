from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .models import CpuPolicy, ExecutionBlock, ProcessMetrics, SchedulingResult


def build_result(
    policy: CpuPolicy,
    quantum: Optional[int],
    timeline: Sequence[ExecutionBlock],
    processes: Sequence[ProcessMetrics],
) -> SchedulingResult:
    """
    Freeze a finished run into a SchedulingResult, computing the aggregates
    once from the full block list and the enriched processes.
    """
    makespan = timeline[-1].end_time if timeline else 0
    idle_time = sum(b.duration for b in timeline if b.is_idle)

    cpu_utilization = (makespan - idle_time) / makespan if makespan > 0 else 0.0
    throughput = len(processes) / makespan if makespan > 0 else 0.0
    summary = summarize_process_metrics(processes)

    return SchedulingResult(
        policy=policy,
        quantum=quantum,
        timeline=tuple(timeline),
        processes=tuple(processes),
        avg_waiting=summary["avg_waiting"],
        avg_turnaround=summary["avg_turnaround"],
        avg_response=summary["avg_response"],
        cpu_utilization=cpu_utilization,
        makespan=makespan,
        idle_time=idle_time,
        throughput=throughput,
    )


def summarize_process_metrics(processes: Iterable[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    processes = list(processes)
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }


def busy_time_by_pid(timeline: Iterable[ExecutionBlock]) -> dict:
    """
    Total CPU time granted to each process id across the timeline.
    """
    totals: dict[str, int] = {}
    for block in timeline:
        if block.is_idle:
            continue
        totals[block.pid] = totals.get(block.pid, 0) + block.duration
    return totals


def timeline_gaps(timeline: Sequence[ExecutionBlock]) -> List[int]:
    """
    Return the indices i where block i does not end where block i + 1 starts.
    An empty list means the timeline is contiguous.
    """
    return [
        i
        for i in range(len(timeline) - 1)
        if timeline[i].end_time != timeline[i + 1].start_time
    ]
