from __future__ import annotations

from typing import Dict, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .colors import IDLE_COLOR, color_map
from .models import ExecutionBlock, SchedulingResult


def render_gantt(blocks: Sequence[ExecutionBlock]) -> str:
    """
    Plain-text Gantt chart: '=' for busy time units, '.' for idle ones.
    """
    if not blocks:
        return "(no execution)"

    line = "|"
    labels = ""
    time_marks = "0"

    for block in blocks:
        width = max(1, block.duration)
        line += ("." if block.is_idle else "=") * width
        labels += ("" if block.is_idle else block.pid[:width]).ljust(width)
        time_marks += f"{block.end_time:>3}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(result: SchedulingResult) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Colours follow each process's position in the input list, so the same
    workload looks the same under every policy.
    """
    if not result.timeline:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors: Dict[str, str] = color_map(p.pid for p in result.processes)

    timeline = Text()
    labels = Text()
    time_marks = "0"

    for block in result.timeline:
        width = max(1, block.duration)
        color = IDLE_COLOR if block.is_idle else colors.get(block.pid, IDLE_COLOR)

        timeline.append(" " * width, style=f"on {color}")
        labels.append(("idle" if block.is_idle else block.pid)[:width].ljust(width), style="dim" if block.is_idle else "bold")
        time_marks += f"{block.end_time:>{max(3, width)}}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
