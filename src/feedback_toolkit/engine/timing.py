"""
Module: engine.timing

Purpose:
    Stage timing for the evaluation service so each result can report
    where its time went and whether it met the latency limit.

Key Classes:
    - TimingLog: Collects per-stage durations in milliseconds

Key Functions:
    - timed_phase: Context manager for timing a stage

Dependencies:
    - time (std)
    - contextlib (std)
    - dataclasses (std)

Used By:
    - engine.controller: Evaluation service
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Generator, Optional

Clock = Callable[[], float]


@dataclass
class TimingLog:
    """
    Stage timings for one evaluation.

    Attributes:
        stages: Stage name -> milliseconds, in the order stages ran
        clock: Seconds clock; injectable so tests can control elapsed time

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "selection"):
        ...     result = select_questions(questions, constraints)
        >>> log.total_ms
        1.7
    """
    stages: Dict[str, float] = field(default_factory=dict)
    clock: Clock = time.perf_counter

    def log_stage(self, stage: str, duration_ms: float) -> None:
        """Record a stage; repeated stages accumulate."""
        self.stages[stage] = self.stages.get(stage, 0.0) + duration_ms

    @property
    def total_ms(self) -> float:
        return sum(self.stages.values())

    def slowest_stage(self) -> Optional[str]:
        if not self.stages:
            return None
        return max(self.stages.items(), key=lambda x: x[1])[0]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["=== Evaluation Timing ==="]
        for stage, ms in self.stages.items():
            lines.append(f"  {stage:20s} {ms:8.2f}ms")
        lines.append(f"  {'total':20s} {self.total_ms:8.2f}ms")
        return "\n".join(lines)


@contextmanager
def timed_phase(log: TimingLog, stage: str) -> Generator[None, None, None]:
    """
    Context manager for timing a stage.

    The elapsed time is recorded even if the block raises.
    """
    start = log.clock()
    try:
        yield
    finally:
        log.log_stage(stage, (log.clock() - start) * 1000)
