from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional, Protocol

from .algorithms import Scheduler
from .errors import SimulationInvariantError, WrongKindError
from .models import BurstKind, Process, SchedulerResult, SystemState, TickEntry, TickStatus

logger = logging.getLogger(__name__)


class TraceRecorder(Protocol):
    def record(self, entry: TickEntry) -> None:
        ...

    def finish(self, trace: List[TickEntry]) -> None:
        ...


@dataclass
class SimulationResult:
    algorithm: str
    quantum: Optional[int]
    trace: List[TickEntry] = field(default_factory=list)
    finished: List[Process] = field(default_factory=list)
    elapsed: int = 0


class Simulation:
    """
    Drives a CPU scheduler and an IO scheduler one tick at a time.

    Each iteration admits every process whose arrival has been reached,
    ticks the CPU scheduler then the IO scheduler, routes processes that
    completed a burst, records a snapshot and advances the clock.
    """

    def __init__(
        self,
        processes: Iterable[Process],
        cpu_scheduler: Scheduler,
        io_scheduler: Scheduler,
        recorder: Optional[TraceRecorder] = None,
        max_ticks: Optional[int] = None,
    ) -> None:
        if cpu_scheduler.kind is not BurstKind.CPU or io_scheduler.kind is not BurstKind.IO:
            raise SimulationInvariantError("schedulers must be given as (cpu, io)")

        self.cpu = cpu_scheduler
        self.io = io_scheduler
        self.recorder = recorder
        self.max_ticks = max_ticks

        self.pending: Deque[Process] = deque(sorted(processes, key=lambda p: p.arrival))
        self.finished: List[Process] = []
        self.trace: List[TickEntry] = []
        self.time = 0

    @property
    def state(self) -> SystemState:
        return SystemState(time=self.time)

    def is_done(self) -> bool:
        return not self.pending and not self.cpu.has_work() and not self.io.has_work()

    def _admit_arrivals(self) -> List[Process]:
        arrived: List[Process] = []
        while self.pending and self.pending[0].arrival <= self.time:
            process = self.pending.popleft()
            logger.debug("t=%d %s arrived", self.time, process.label())
            arrived.append(process.snapshot())
            self.cpu.enqueue(process)
        return arrived

    def _scheduler_for(self, kind: BurstKind) -> Scheduler:
        return self.cpu if kind is BurstKind.CPU else self.io

    def _collect(self, result: SchedulerResult, routed: List[Process]) -> None:
        if result.status is TickStatus.WRONG_KIND:
            raise SimulationInvariantError(
                f"t={self.time}: process {result.process.pid} reached a scheduler of the wrong kind"
            )
        if not result.completed:
            return

        process = result.process
        if process.is_terminal:
            logger.debug("t=%d %s finished", self.time, process.label())
            self.finished.append(process)
        else:
            routed.append(process)

    def _route(self, process: Process) -> None:
        target = self._scheduler_for(process.active_burst.kind)
        logger.debug("t=%d routing %s to %s", self.time, process.label(), target.kind.value)
        try:
            target.enqueue(process)
        except WrongKindError as exc:
            raise SimulationInvariantError(f"t={self.time}: {exc}") from exc

    def step(self) -> TickEntry:
        """
        Run one iteration of the loop and return its snapshot.
        """
        if self.max_ticks is not None and self.time >= self.max_ticks:
            raise SimulationInvariantError(f"simulation exceeded {self.max_ticks} ticks")

        arrived = self._admit_arrivals()
        state = self.state

        cpu_result = self.cpu.tick(state)
        io_result = self.io.tick(state)

        # enqueues wait until both schedulers ticked
        routed: List[Process] = []
        self._collect(cpu_result, routed)
        self._collect(io_result, routed)
        for process in routed:
            self._route(process)

        entry = TickEntry(
            time=self.time,
            cpu=cpu_result.snapshot(),
            io=io_result.snapshot(),
            arrived=arrived,
            cpu_queue=[p.snapshot() for p in self.cpu.get_queue()],
            io_queue=[p.snapshot() for p in self.io.get_queue()],
            yet_to_arrive=[p.snapshot() for p in self.pending],
            finished=[p.snapshot() for p in self.finished],
        )
        self.trace.append(entry)
        if self.recorder is not None:
            self.recorder.record(entry)

        self.time += 1
        return entry

    def run(self) -> SimulationResult:
        while True:
            self.step()
            if self.is_done():
                break

        if self.recorder is not None:
            self.recorder.finish(self.trace)

        return SimulationResult(
            algorithm=self.cpu.label,
            quantum=getattr(self.cpu, "quantum", None),
            trace=self.trace,
            finished=self.finished,
            elapsed=self.time,
        )


def run_simulation(
    processes: Iterable[Process],
    cpu_scheduler: Scheduler,
    io_scheduler: Scheduler,
    recorder: Optional[TraceRecorder] = None,
    max_ticks: Optional[int] = None,
) -> SimulationResult:
    return Simulation(processes, cpu_scheduler, io_scheduler, recorder=recorder, max_ticks=max_ticks).run()
