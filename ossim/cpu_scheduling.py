from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .errors import InvalidWorkloadError
from .metrics import build_result
from .models import IDLE, CpuPolicy, ExecutionBlock, Process, ProcessMetrics, SchedulingResult

logger = logging.getLogger(__name__)

# rank(process, remaining_time) -> primary ordering value; lower runs first.
RankFn = Callable[[Process, int], int]


def _validate(processes: Sequence[Process]) -> None:
    seen: set[str] = set()
    for p in processes:
        if p.pid in seen:
            raise InvalidWorkloadError(f"Duplicate process id '{p.pid}'")
        seen.add(p.pid)
        if p.burst_time <= 0:
            raise InvalidWorkloadError(f"Process '{p.pid}' must have a positive burst time")
        if p.arrival_time < 0:
            raise InvalidWorkloadError(f"Process '{p.pid}' has a negative arrival time")


def _extend(timeline: List[ExecutionBlock], pid: str, start: int, end: int) -> None:
    """
    Append [start, end) for pid, merging with the previous block when the same
    id was already running right up to start.
    """
    if end <= start:
        return
    if timeline and timeline[-1].pid == pid and timeline[-1].end_time == start:
        last = timeline.pop()
        timeline.append(ExecutionBlock(pid=pid, start_time=last.start_time, end_time=end))
        return
    timeline.append(ExecutionBlock(pid=pid, start_time=start, end_time=end))


def _process_metrics(p: Process, start_time: int, completion_time: int) -> ProcessMetrics:
    turnaround_time = completion_time - p.arrival_time
    return ProcessMetrics(
        pid=p.pid,
        arrival_time=p.arrival_time,
        burst_time=p.burst_time,
        priority=p.priority,
        start_time=start_time,
        completion_time=completion_time,
        waiting_time=turnaround_time - p.burst_time,
        turnaround_time=turnaround_time,
        response_time=start_time - p.arrival_time,
    )


def _collect(
    processes: Sequence[Process],
    first_run: Dict[str, int],
    completion: Dict[str, int],
) -> List[ProcessMetrics]:
    # Input order, so position doubles as the colour identity.
    return [_process_metrics(p, first_run[p.pid], completion[p.pid]) for p in processes]


def _schedule_non_preemptive(processes: Sequence[Process], rank: RankFn) -> Tuple[List[ExecutionBlock], List[ProcessMetrics]]:
    """
    At each decision point pick the arrived process with the lowest rank
    (tie-breaker: earlier arrival, then input order) and run it to completion.
    """
    pending = list(enumerate(processes))

    time = 0
    timeline: List[ExecutionBlock] = []
    first_run: Dict[str, int] = {}
    completion: Dict[str, int] = {}

    while pending:
        ready = [(idx, p) for idx, p in pending if p.arrival_time <= time]

        if not ready:
            next_arrival = min(p.arrival_time for _, p in pending)
            _extend(timeline, IDLE, time, next_arrival)
            time = next_arrival
            continue

        idx, p = min(ready, key=lambda item: (rank(item[1], item[1].burst_time), item[1].arrival_time, item[0]))
        logger.debug("t=%d dispatch %s (ready: %s)", time, p.pid, [r.pid for _, r in ready])

        first_run[p.pid] = time
        _extend(timeline, p.pid, time, time + p.burst_time)
        time += p.burst_time
        completion[p.pid] = time
        pending.remove((idx, p))

    return timeline, _collect(processes, first_run, completion)


def _schedule_preemptive(processes: Sequence[Process], rank: RankFn) -> Tuple[List[ExecutionBlock], List[ProcessMetrics]]:
    """
    Re-evaluate the choice whenever something can change it. Between two
    arrivals the ranking of ready processes cannot change except by the running
    one finishing, so the clock jumps from event to event; consecutive runs of
    the same id are merged into one block.
    """
    indexed = list(enumerate(processes))
    remaining = {p.pid: p.burst_time for p in processes}

    time = 0
    timeline: List[ExecutionBlock] = []
    first_run: Dict[str, int] = {}
    completion: Dict[str, int] = {}

    def next_arrival_after(t: int) -> Optional[int]:
        future = [p.arrival_time for p in processes if p.arrival_time > t and remaining[p.pid] > 0]
        return min(future) if future else None

    while len(completion) < len(processes):
        ready = [(idx, p) for idx, p in indexed if p.arrival_time <= time and remaining[p.pid] > 0]

        if not ready:
            nxt = next_arrival_after(time)
            _extend(timeline, IDLE, time, nxt)
            time = nxt
            continue

        idx, current = min(
            ready,
            key=lambda item: (rank(item[1], remaining[item[1].pid]), item[1].arrival_time, item[0]),
        )

        if current.pid not in first_run:
            first_run[current.pid] = time
        if timeline and timeline[-1].pid not in (current.pid, IDLE):
            logger.debug("t=%d preempt %s -> %s", time, timeline[-1].pid, current.pid)

        # Run until completion or next arrival, whichever comes first.
        nxt = next_arrival_after(time)
        run_time = remaining[current.pid]
        if nxt is not None:
            run_time = min(run_time, nxt - time)

        _extend(timeline, current.pid, time, time + run_time)
        time += run_time
        remaining[current.pid] -= run_time

        if remaining[current.pid] == 0:
            completion[current.pid] = time

    return timeline, _collect(processes, first_run, completion)


def _by_arrival(p: Process, remaining: int) -> int:
    return p.arrival_time


def _by_burst(p: Process, remaining: int) -> int:
    return p.burst_time


def _by_remaining(p: Process, remaining: int) -> int:
    return remaining


def _by_priority(p: Process, remaining: int) -> int:
    return p.priority


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> SchedulingResult:
    """
    First-Come First-Serve (non-preemptive); ties broken by input order.
    """
    _validate(processes)
    timeline, metrics = _schedule_non_preemptive(processes, _by_arrival)
    return build_result(CpuPolicy.FCFS, None, timeline, metrics)


def schedule_sjf(processes: Sequence[Process], quantum: Optional[int] = None) -> SchedulingResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time.
    """
    _validate(processes)
    timeline, metrics = _schedule_non_preemptive(processes, _by_burst)
    return build_result(CpuPolicy.SJF_NP, None, timeline, metrics)


def schedule_srtf(processes: Sequence[Process], quantum: Optional[int] = None) -> SchedulingResult:
    """
    Shortest Remaining Time First (preemptive SJF).
    """
    _validate(processes)
    timeline, metrics = _schedule_preemptive(processes, _by_remaining)
    return build_result(CpuPolicy.SJF_P, None, timeline, metrics)


def schedule_priority(processes: Sequence[Process], quantum: Optional[int] = None) -> SchedulingResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Among ready
    processes, choose the one with the smallest priority; break ties
    by earlier arrival time, then input order.
    """
    _validate(processes)
    timeline, metrics = _schedule_non_preemptive(processes, _by_priority)
    return build_result(CpuPolicy.PRIORITY_NP, None, timeline, metrics)


def schedule_priority_preemptive(processes: Sequence[Process], quantum: Optional[int] = None) -> SchedulingResult:
    """
    Preemptive priority: a newly arrived process with a lower priority value
    takes the CPU from the running one.
    """
    _validate(processes)
    timeline, metrics = _schedule_preemptive(processes, _by_priority)
    return build_result(CpuPolicy.PRIORITY_P, None, timeline, metrics)


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> SchedulingResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice is running join the ready queue, in
    arrival order, before the preempted process is put back at its tail.
    """
    if quantum is None or quantum <= 0:
        raise InvalidWorkloadError("Round Robin requires a positive quantum (use --quantum)")
    _validate(processes)

    remaining = {p.pid: p.burst_time for p in processes}
    # Not yet arrived, in arrival order (ties: input order).
    arrivals = deque(sorted(processes, key=lambda p: p.arrival_time))

    time = 0
    timeline: List[ExecutionBlock] = []
    first_run: Dict[str, int] = {}
    completion: Dict[str, int] = {}

    ready: deque[Process] = deque()

    def enqueue_new_arrivals(current_time: int) -> None:
        while arrivals and arrivals[0].arrival_time <= current_time:
            ready.append(arrivals.popleft())

    enqueue_new_arrivals(time)

    while len(completion) < len(processes):
        if not ready:
            # Jump to next arrival if CPU is idle
            next_arrival = arrivals[0].arrival_time
            timeline.append(ExecutionBlock(pid=IDLE, start_time=time, end_time=next_arrival))
            time = next_arrival
            enqueue_new_arrivals(time)
            continue

        p = ready.popleft()
        if p.pid not in first_run:
            first_run[p.pid] = time

        run_time = min(quantum, remaining[p.pid])
        timeline.append(ExecutionBlock(pid=p.pid, start_time=time, end_time=time + run_time))
        time += run_time
        remaining[p.pid] -= run_time

        enqueue_new_arrivals(time)

        if remaining[p.pid] > 0:
            ready.append(p)
        else:
            completion[p.pid] = time

        logger.debug("t=%d ran %s for %d, queue: %s", time, p.pid, run_time, [q.pid for q in ready])

    metrics = _collect(processes, first_run, completion)
    return build_result(CpuPolicy.ROUND_ROBIN, quantum, timeline, metrics)


ALGORITHMS: Dict[CpuPolicy, Callable[..., SchedulingResult]] = {
    CpuPolicy.FCFS: schedule_fcfs,
    CpuPolicy.SJF_NP: schedule_sjf,
    CpuPolicy.SJF_P: schedule_srtf,
    CpuPolicy.PRIORITY_NP: schedule_priority,
    CpuPolicy.PRIORITY_P: schedule_priority_preemptive,
    CpuPolicy.ROUND_ROBIN: schedule_rr,
}


# Short names accepted on the command line.
ALIASES = {
    "sjf": CpuPolicy.SJF_NP,
    "srtf": CpuPolicy.SJF_P,
    "priority": CpuPolicy.PRIORITY_NP,
    "rr": CpuPolicy.ROUND_ROBIN,
}


def parse_policy(name: Union[str, CpuPolicy]) -> CpuPolicy:
    key = str(getattr(name, "value", name)).lower()
    if key in ALIASES:
        return ALIASES[key]
    try:
        return CpuPolicy(key)
    except ValueError:
        valid = ", ".join(p.value for p in CpuPolicy)
        raise ValueError(f"Unknown CPU scheduling policy '{name}' (choose from {valid})") from None


def schedule(
    processes: Sequence[Process],
    policy: Union[str, CpuPolicy],
    quantum: Optional[int] = None,
) -> SchedulingResult:
    """
    Run one policy over the workload and return the full, immutable trace.
    Quantum is only consulted by round robin.
    """
    policy = parse_policy(policy)
    func = ALGORITHMS[policy]
    result = func(list(processes), quantum=quantum if policy is CpuPolicy.ROUND_ROBIN else None)
    logger.debug(
        "%s: %d blocks, makespan %d, utilization %.3f",
        policy.value,
        len(result.timeline),
        result.makespan,
        result.cpu_utilization,
    )
    return result


def compare(
    processes: Sequence[Process],
    policies: Iterable[Union[str, CpuPolicy]],
    quantum: Optional[int] = None,
) -> List[SchedulingResult]:
    """
    Run several policies over the same workload, in the order given.
    """
    return [schedule(processes, policy, quantum=quantum) for policy in policies]
