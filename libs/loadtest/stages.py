"""Staged virtual-user schedule.

A schedule is a list of ``{"duration": seconds, "target": users}`` stages.
Each stage moves the user count linearly from the previous stage's target
(zero for the first stage) to its own target over its duration.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Stage:
    """A time-bounded segment of the load profile."""
    duration: float
    target: int

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError(f"Stage duration must be positive, got {self.duration}")
        if self.target < 0:
            raise ValueError(f"Stage target must be >= 0, got {self.target}")


def build_stages(raw: Iterable[Mapping[str, Any]]) -> List[Stage]:
    """Build ``Stage`` objects from configuration dicts."""
    return [Stage(duration=float(item["duration"]), target=int(item["target"])) for item in raw]


def total_duration(stages: List[Stage]) -> float:
    return sum(stage.duration for stage in stages)


def target_at(stages: List[Stage], elapsed: float) -> Optional[Tuple[int, float]]:
    """Return ``(user_count, spawn_rate)`` for ``elapsed`` seconds into the run.

    ``None`` means the schedule is over. The spawn rate is the stage's slope
    in users per second, floored at 1 so holds and short ramps still converge.
    """
    if elapsed < 0:
        raise ValueError("elapsed must be >= 0")

    start_users = 0
    stage_start = 0.0
    for stage in stages:
        stage_end = stage_start + stage.duration
        if elapsed < stage_end:
            fraction = (elapsed - stage_start) / stage.duration
            users = round(start_users + (stage.target - start_users) * fraction)
            slope = abs(stage.target - start_users) / stage.duration
            return users, max(slope, 1.0)
        start_users = stage.target
        stage_start = stage_end
    return None
