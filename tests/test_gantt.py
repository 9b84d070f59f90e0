from rich.panel import Panel

from ossim.cpu_scheduling import schedule
from ossim.gantt import build_rich_gantt, render_gantt
from ossim.models import Process


def test_render_gantt_marks_idle_time():
    res = schedule([Process("P1", 2, 3)], "fcfs")
    chart = render_gantt(res.timeline)
    lines = chart.splitlines()
    assert lines[1] == "|..===|"
    assert lines[2].strip() == "P1"
    assert lines[3] == "0  2  5"


def test_render_gantt_empty():
    assert render_gantt(()) == "(no execution)"


def test_build_rich_gantt():
    res = schedule([Process("P1", 0, 2), Process("P2", 0, 1)], "fcfs")
    panel, marks = build_rich_gantt(res)
    assert isinstance(panel, Panel)
    assert marks == "0  2  3"

    empty_panel, empty_marks = build_rich_gantt(schedule([], "fcfs"))
    assert empty_marks == ""
