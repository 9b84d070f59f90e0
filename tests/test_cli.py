import argparse
import json
from pathlib import Path

import pytest

from ossim.cli import main, parse_memory_op


def _workload(tmp_path: Path) -> Path:
    p = tmp_path / "w.json"
    p.write_text(json.dumps([
        {"pid": "P1", "arrival_time": 0, "burst_time": 5, "priority": 2},
        {"pid": "P2", "arrival_time": 1, "burst_time": 3, "priority": 1},
    ]))
    return p


def test_cpu_run(tmp_path: Path, capsys):
    assert main(["cpu", "-a", "round-robin", "-w", str(_workload(tmp_path)), "-q", "2"]) == 0
    out = capsys.readouterr().out
    assert "round-robin" in out
    assert "P2" in out
    assert "CPU utilization" in out


def test_cpu_step_replay(tmp_path: Path, capsys):
    assert main(["cpu", "-a", "fcfs", "-w", str(_workload(tmp_path)), "--step", "--step-delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "t= 7: P2" in out


def test_compare(tmp_path: Path, capsys):
    assert main(["compare", "-w", str(_workload(tmp_path)), "-a", "fcfs", "sjf-p"]) == 0
    out = capsys.readouterr().out
    assert "fcfs" in out and "sjf-p" in out


def test_memory_ops(capsys):
    code = main([
        "memory",
        "--blocks", "500,300,200,400",
        "-p", "best-fit",
        "--op", "alloc:P1:150",
        "--op", "alloc:P2:999",
        "--op", "free:P9",
        "--op", "add:50",
    ])
    assert code == 0
    out = capsys.readouterr().out
    assert "allocated to Block 2" in out
    assert "No suitable block" in out
    assert "not found" in out
    assert "Block 4 (50KB) added" in out


def test_disk(capsys):
    assert main(["disk", "-r", "98,183,37,122,14,124,65,67", "--head", "53", "-p", "sstf"]) == 0
    out = capsys.readouterr().out
    assert "236" in out


def test_disk_step_replay(capsys):
    assert main(["disk", "-r", "60,70", "--head", "50", "--step", "--step-delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "50 -> 60" in out


def test_errors_exit_with_code_2(tmp_path: Path, capsys):
    assert main(["cpu", "-a", "rr", "-w", str(_workload(tmp_path)), "-q", "0"]) == 2
    assert "Error" in capsys.readouterr().out
    assert main(["disk", "-r", "500", "--max-cylinder", "199"]) == 2
    assert main(["cpu", "-a", "fcfs", "-w", str(tmp_path / "missing.json")]) == 2


def test_parse_memory_op():
    assert parse_memory_op("alloc:P1:100") == ("alloc", "P1", 100)
    assert parse_memory_op("free:P1") == ("free", "P1")
    assert parse_memory_op("add:64") == ("add", 64)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_memory_op("alloc:P1")
