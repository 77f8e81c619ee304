"""Ramping virtual-user schedule shared by the asyncio runner and Locust."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(slots=True, frozen=True)
class Stage:
    """Move linearly from the previous target to ``target`` over the stage."""

    duration_seconds: float
    target: int


DEFAULT_STAGES: tuple[Stage, ...] = (
    Stage(duration_seconds=10, target=5),  # ramp up
    Stage(duration_seconds=30, target=10),  # peak
    Stage(duration_seconds=10, target=0),  # ramp down
)


class RampSchedule:
    """Piecewise-linear VU target over elapsed run time."""

    def __init__(self, stages: Sequence[Stage] | None = None, start_users: int = 0) -> None:
        self.stages = list(stages if stages is not None else DEFAULT_STAGES)
        if not self.stages:
            raise ValueError("Schedule needs at least one stage")
        if any(stage.duration_seconds <= 0 for stage in self.stages):
            raise ValueError("Stage durations must be positive")
        self.start_users = start_users

    @property
    def total_duration(self) -> float:
        return sum(stage.duration_seconds for stage in self.stages)

    @property
    def max_target(self) -> int:
        return max([self.start_users, *(stage.target for stage in self.stages)])

    def target_at(self, elapsed: float) -> int | None:
        """Return the VU target at ``elapsed`` seconds, or None once finished."""

        if elapsed < 0:
            return self.start_users
        previous = self.start_users
        stage_start = 0.0
        for stage in self.stages:
            stage_end = stage_start + stage.duration_seconds
            if elapsed < stage_end:
                progress = (elapsed - stage_start) / stage.duration_seconds
                return round(previous + (stage.target - previous) * progress)
            previous = stage.target
            stage_start = stage_end
        return None


__all__ = ["DEFAULT_STAGES", "RampSchedule", "Stage"]
