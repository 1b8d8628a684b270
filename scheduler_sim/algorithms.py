from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple, Type

from .errors import SelectionError, WrongKindError
from .models import BurstKind, Process, SchedulerResult, SystemState, TickStatus

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """
    A ready queue plus a running slot, bound to one burst kind.

    Subclasses only decide which queued process runs next and what happens
    after a unit of work that did not finish the burst.
    """

    label = "Scheduler"

    def __init__(self, kind: BurstKind) -> None:
        self.kind = kind
        self._ready: Deque[Process] = deque()
        self._current: Optional[Process] = None

    @property
    def current(self) -> Optional[Process]:
        return self._current

    def has_work(self) -> bool:
        return self._current is not None or bool(self._ready)

    def get_queue(self) -> List[Process]:
        return list(self._ready)

    def enqueue(self, process: Process) -> None:
        active = process.active_burst
        # a process with no bursts left is reported back as NO_BURST_LEFT by the CPU side
        if active is None and self.kind is not BurstKind.CPU:
            raise WrongKindError(self.kind, process)
        if active is not None and active.kind is not self.kind:
            raise WrongKindError(self.kind, process)
        self._ready.append(process)

    def tick(self, state: SystemState) -> SchedulerResult:
        if self._current is None:
            if not self._ready:
                return SchedulerResult.idle()
            self._current = self._select()
            self._on_select(self._current, state)

        process = self._current
        burst = process.active_burst
        if burst is None:
            self._current = None
            return SchedulerResult(TickStatus.NO_BURST_LEFT, process)
        if burst.kind is not self.kind:
            self._current = None
            return SchedulerResult(TickStatus.WRONG_KIND, process)

        process.tick(state)
        if burst.remaining == 0:
            process.complete_burst()
            self._current = None
            return SchedulerResult(TickStatus.FINISHED, process)

        self._after_run(process, state)
        return SchedulerResult(TickStatus.PROCESSING, process)

    @abstractmethod
    def _select(self) -> Process:
        """Remove and return the next process to run. The ready queue is non-empty."""

    def _on_select(self, process: Process, state: SystemState) -> None:
        logger.debug("t=%d %s %s selected %s", state.time, self.kind.value, self.label, process.label())

    def _after_run(self, process: Process, state: SystemState) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, ready={[p.pid for p in self._ready]})"


class FCFSScheduler(Scheduler):
    """
    First-Come First-Serve (non-preemptive).
    """

    label = "FCFS"

    def _select(self) -> Process:
        return self._ready.popleft()


class PriorityScheduler(Scheduler):
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Ties go to whichever
    process was enqueued first. A running burst is never interrupted.
    """

    label = "Priority"

    def _select(self) -> Process:
        # min() keeps the first of equal keys, which is the earliest enqueued
        idx, _ = min(enumerate(self._ready), key=lambda item: item[1].priority)
        process = self._ready[idx]
        del self._ready[idx]
        return process


class RoundRobinScheduler(Scheduler):
    """
    Round Robin scheduling with a fixed time quantum.
    """

    label = "Round Robin"

    def __init__(self, kind: BurstKind, quantum: Optional[int] = None) -> None:
        if quantum is None or quantum <= 0:
            raise SelectionError("Round Robin requires a positive quantum")
        super().__init__(kind)
        self.quantum = quantum
        self._used = 0

    def _select(self) -> Process:
        return self._ready.popleft()

    def _on_select(self, process: Process, state: SystemState) -> None:
        self._used = 0
        super()._on_select(process, state)

    def _after_run(self, process: Process, state: SystemState) -> None:
        self._used += 1
        if self._used >= self.quantum:
            logger.debug(
                "t=%d %s quantum of %d expired for %s", state.time, self.kind.value, self.quantum, process.label()
            )
            self._ready.append(process)
            self._current = None


ALGORITHMS: Dict[str, Type[Scheduler]] = {
    "fcfs": FCFSScheduler,
    "priority": PriorityScheduler,
    "rr": RoundRobinScheduler,
}

# numbered choices offered by the interactive menu
MENU_CHOICES: Dict[str, str] = {
    "1": "fcfs",
    "2": "priority",
    "3": "rr",
}


def resolve_algorithm(choice: str) -> str:
    """
    Map a menu number or algorithm name onto a key of ``ALGORITHMS``.
    """
    key = choice.strip().lower()
    key = MENU_CHOICES.get(key, key)
    if key not in ALGORITHMS:
        raise SelectionError(f"Unknown algorithm '{choice}'")
    return key


def build_scheduler(name: str, kind: BurstKind, quantum: Optional[int] = None) -> Scheduler:
    """
    Instantiate the named policy for one burst kind. Quantum is only used by
    round-robin.
    """
    cls = ALGORITHMS[resolve_algorithm(name)]
    if cls is RoundRobinScheduler:
        return RoundRobinScheduler(kind, quantum=quantum)
    return cls(kind)


def build_schedulers(
    name: str, quantum: Optional[int] = None, io_name: Optional[str] = None
) -> Tuple[Scheduler, Scheduler]:
    """
    Build the (CPU, IO) scheduler pair. The IO side uses the same policy
    unless ``io_name`` says otherwise.
    """
    cpu = build_scheduler(name, BurstKind.CPU, quantum=quantum)
    io = build_scheduler(io_name or name, BurstKind.IO, quantum=quantum)
    return cpu, io
