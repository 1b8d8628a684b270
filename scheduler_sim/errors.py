from __future__ import annotations


class SchedulerSimError(Exception):
    """
    Base class for every fatal condition raised by the simulator.
    """


class WorkloadError(SchedulerSimError, ValueError):
    """
    An input record could not be parsed into a process.
    """


class SelectionError(SchedulerSimError, ValueError):
    """
    Unknown algorithm choice or an invalid round-robin quantum.
    """


class SimulationInvariantError(SchedulerSimError, RuntimeError):
    """
    The orchestration broke one of its own invariants.
    """


class WrongKindError(SimulationInvariantError):
    def __init__(self, scheduler_kind, process) -> None:
        active = process.active_burst
        found = active.kind.value if active is not None else "none"
        super().__init__(
            f"{scheduler_kind.value} scheduler got process {process.pid} ({process.name}) "
            f"whose active burst is {found}"
        )
        self.scheduler_kind = scheduler_kind
        self.process = process


class TraceWriteError(SchedulerSimError, OSError):
    """
    The finished trace could not be written to the requested file.
    """
