from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


IDLE = "IDLE"


class CpuPolicy(str, Enum):
    FCFS = "fcfs"
    SJF_NP = "sjf-np"
    SJF_P = "sjf-p"
    PRIORITY_NP = "priority-np"
    PRIORITY_P = "priority-p"
    ROUND_ROBIN = "round-robin"


class AllocationPolicy(str, Enum):
    FIRST_FIT = "first-fit"
    BEST_FIT = "best-fit"
    WORST_FIT = "worst-fit"


class DiskPolicy(str, Enum):
    FCFS = "fcfs"
    SSTF = "sstf"
    SCAN = "scan"
    LOOK = "look"


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class FileType(str, Enum):
    TEXT = "text"
    BINARY = "binary"
    IMAGE = "image"


# --- CPU scheduling ---------------------------------------------------------


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass(frozen=True)
class ExecutionBlock:
    """
    One contiguous interval of the timeline, owned by a process or by IDLE.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def is_idle(self) -> bool:
        return self.pid == IDLE


@dataclass(frozen=True)
class ProcessMetrics:
    pid: str
    arrival_time: int
    burst_time: int
    priority: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass(frozen=True)
class SchedulingResult:
    policy: CpuPolicy
    quantum: Optional[int]
    timeline: Tuple[ExecutionBlock, ...] = ()
    processes: Tuple[ProcessMetrics, ...] = ()
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    avg_response: float = 0.0
    cpu_utilization: float = 0.0
    makespan: int = 0
    idle_time: int = 0
    throughput: float = 0.0

    @property
    def busy_time(self) -> int:
        return self.makespan - self.idle_time


# --- Memory allocation ------------------------------------------------------


@dataclass(frozen=True)
class MemoryBlock:
    block_id: int
    size: int
    tenant: Optional[str] = None
    tenant_size: Optional[int] = None

    @property
    def allocated(self) -> bool:
        return self.tenant is not None

    @property
    def internal_fragmentation(self) -> int:
        if self.tenant_size is None:
            return 0
        return self.size - self.tenant_size


@dataclass(frozen=True)
class AllocationResult:
    blocks: Tuple[MemoryBlock, ...]
    success: bool
    message: str
    block_id: Optional[int] = None


@dataclass(frozen=True)
class FragmentationReport:
    internal_fragmentation: int
    external_fragmentation: int
    total_free_memory: int
    total_allocated_memory: int
    total_memory: int
    utilization_percentage: float


# --- Disk scheduling --------------------------------------------------------


@dataclass(frozen=True)
class DiskRequest:
    request_id: int
    cylinder: int


@dataclass(frozen=True)
class SeekOperation:
    from_cylinder: int
    to_cylinder: int
    seek: int
    boundary: bool = False


@dataclass(frozen=True)
class DiskSchedulingResult:
    policy: DiskPolicy
    head_position: int
    sequence: Tuple[int, ...] = ()
    seek_operations: Tuple[SeekOperation, ...] = ()
    total_seek_time: int = 0
    success: bool = True
    message: str = ""

    @property
    def average_seek_time(self) -> float:
        if not self.seek_operations:
            return 0.0
        return self.total_seek_time / len(self.seek_operations)


# --- File directory ---------------------------------------------------------


@dataclass(frozen=True)
class FileItem:
    file_id: int
    name: str
    file_type: FileType
    size: int
    content: str
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class FileResult:
    files: Tuple[FileItem, ...]
    success: bool
    message: str
    file_id: Optional[int] = None
