"""
Scheduler simulator package.

Steps processes with alternating CPU and IO bursts through a CPU scheduler
and an IO scheduler one tick at a time, and records the resulting trace.
"""

__all__ = ["algorithms", "cli", "models", "simulation"]
