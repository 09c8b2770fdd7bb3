"""
Progression Builder

Week-indexed checkpoints on the way from a start value to a target.

Linear for now. Phase-aware progression (slow start, faster middle, taper)
would reuse the same checkpoint shape; milestones and prompts only read
`week` and `value`.
"""

from dataclasses import dataclass
from typing import List, Optional

from .constants import UNKNOWN_START_FRACTION


@dataclass(frozen=True)
class ProgressionCheckpoint:
    week: int
    value: float

    def to_dict(self):
        return {"week": self.week, "value": self.value}


def build_progression(start: Optional[float], target: float, weeks: int) -> List[ProgressionCheckpoint]:
    """
    Build weekly checkpoints from start to target.

    Args:
        start: Current value; None assumes 80% of target (conservative)
        target: Target value
        weeks: Number of weeks, >= 1

    Returns:
        Exactly `weeks` checkpoints, week 1..weeks, values rounded to 2 dp.
        The last checkpoint equals the target.
    """
    if weeks < 1:
        raise ValueError(f"weeks must be >= 1, got {weeks}")

    start_value = target * UNKNOWN_START_FRACTION if start is None else start
    step_size = (target - start_value) / weeks

    return [
        ProgressionCheckpoint(week=week, value=round(start_value + step_size * week, 2))
        for week in range(1, weeks + 1)
    ]
