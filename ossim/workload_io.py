from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Callable, Iterable, List, Tuple, TypeVar

from .disk_scheduling import make_requests
from .memory_allocation import create_blocks
from .models import DiskRequest, MemoryBlock, Process

T = TypeVar("T")


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    return _load_entries(path, _process_from_mapping)


def load_blocks(path: str | Path) -> Tuple[MemoryBlock, ...]:
    """
    Load memory partition sizes (a JSON list of numbers or ``{"size": ...}``
    objects, or a CSV with a ``size`` column) as free blocks.
    """
    sizes = _load_entries(path, lambda entry: _int_field(entry, "size"))
    return create_blocks(sizes)


def load_disk_requests(path: str | Path) -> List[DiskRequest]:
    """
    Load disk requests (a JSON list of cylinders or ``{"cylinder": ...}``
    objects, or a CSV with a ``cylinder`` column). Ids follow file order.
    """
    cylinders = _load_entries(path, lambda entry: _int_field(entry, "cylinder"))
    return make_requests(cylinders)


def parse_int_list(text: str) -> List[int]:
    """
    Parse "98, 183,37" into [98, 183, 37].
    """
    try:
        return [int(part) for part in text.replace(",", " ").split()]
    except ValueError as exc:
        raise ValueError(f"Expected a comma-separated list of integers, got {text!r}") from exc


def _load_entries(path: str | Path, convert: Callable[[Any], T]) -> List[T]:
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return [convert(entry) for entry in _load_json(path)]
    if suffix == ".csv":
        return [convert(row) for row in _load_csv(path)]

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> list:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, Iterable) or isinstance(raw, (str, dict)):
        raise ValueError("JSON workload must be a list of entries")

    return list(raw)


def _load_csv(path: Path) -> list:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return list(reader)


def _int_field(entry, key: str) -> int:
    try:
        if isinstance(entry, dict):
            return int(entry[key])
        return int(entry)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {key} entry: {entry!r}") from exc


def _process_from_mapping(mapping) -> Process:
    try:
        pid = str(mapping["pid"])
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = int(priority_val) if priority_val not in (None, "") else 0
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid priority in process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )
