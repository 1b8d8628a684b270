from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import SimulationInvariantError


class BurstKind(str, Enum):
    CPU = "cpu"
    IO = "io"

    def other(self) -> "BurstKind":
        return BurstKind.IO if self is BurstKind.CPU else BurstKind.CPU


@dataclass
class Burst:
    """
    One contiguous span of CPU or IO demand.
    """

    kind: BurstKind
    remaining: int


@dataclass(frozen=True)
class SystemState:
    """
    Read-only view of the simulation clock handed to every tick.
    """

    time: int = 0


@dataclass
class Process:
    name: str
    pid: int
    priority: int
    arrival: int
    bursts: List[Burst] = field(default_factory=list)

    @property
    def active_burst(self) -> Optional[Burst]:
        return self.bursts[0] if self.bursts else None

    @property
    def is_terminal(self) -> bool:
        return not self.bursts

    def total_remaining(self) -> int:
        return sum(b.remaining for b in self.bursts)

    def tick(self, state: SystemState) -> None:
        """
        Advance the active burst by one unit of work.

        The completed burst is left in place; removing it is up to the
        scheduler once it sees ``remaining == 0``.
        """
        if self.arrival > state.time:
            raise SimulationInvariantError(
                f"process {self.pid} ({self.name}) ticked at {state.time} before its arrival at {self.arrival}"
            )
        burst = self.active_burst
        if burst is None:
            raise SimulationInvariantError(f"process {self.pid} ({self.name}) has no burst to tick")
        # zero-length bursts still take one tick to retire
        burst.remaining = max(0, burst.remaining - 1)

    def complete_burst(self) -> Burst:
        return self.bursts.pop(0)

    def snapshot(self) -> "Process":
        """
        Detached copy for trace recording.
        """
        return Process(
            name=self.name,
            pid=self.pid,
            priority=self.priority,
            arrival=self.arrival,
            bursts=[Burst(b.kind, b.remaining) for b in self.bursts],
        )

    def label(self) -> str:
        return f"{self.name}#{self.pid}"


class TickStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    FINISHED = "finished"
    NO_BURST_LEFT = "no_burst_left"
    WRONG_KIND = "wrong_kind"


@dataclass(frozen=True)
class SchedulerResult:
    """
    Outcome of a single scheduler tick.
    """

    status: TickStatus
    process: Optional[Process] = None

    @classmethod
    def idle(cls) -> "SchedulerResult":
        return cls(TickStatus.IDLE)

    @property
    def ran(self) -> bool:
        # True when one unit of burst work was attributed to ``process``
        return self.status in (TickStatus.PROCESSING, TickStatus.FINISHED)

    @property
    def completed(self) -> bool:
        return self.status in (TickStatus.FINISHED, TickStatus.NO_BURST_LEFT)

    def snapshot(self) -> "SchedulerResult":
        if self.process is None:
            return self
        return SchedulerResult(self.status, self.process.snapshot())


@dataclass
class TickEntry:
    """
    Everything observable about the system at the end of one tick.
    """

    time: int
    cpu: SchedulerResult
    io: SchedulerResult
    arrived: List[Process] = field(default_factory=list)
    cpu_queue: List[Process] = field(default_factory=list)
    io_queue: List[Process] = field(default_factory=list)
    yet_to_arrive: List[Process] = field(default_factory=list)
    finished: List[Process] = field(default_factory=list)


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int


@dataclass
class ProcessMetrics:
    pid: int
    name: str
    arrival_time: int
    cpu_time: int
    io_time: int
    first_run: Optional[int]
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: Optional[int]
    priority: int


@dataclass
class SystemMetrics:
    makespan: int
    cpu_busy_time: int
    io_busy_time: int
    throughput: float
    cpu_utilization: float
    io_utilization: float
