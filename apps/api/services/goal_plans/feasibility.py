"""
Feasibility Assessor

Conservative timeline checks. Endurance events need at least 12 weeks;
body composition changes are capped at 0.5 kg/week.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import (
    MIN_ENDURANCE_EVENT_WEEKS,
    SAFE_WEEKLY_WEIGHT_CHANGE_KG,
    GoalCategory,
    RiskLevel,
)


@dataclass
class FeasibilityAssessment:
    is_feasible: bool
    risk_level: RiskLevel
    recommended_adjustments: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_feasible": self.is_feasible,
            "risk_level": self.risk_level.value,
            "recommended_adjustments": list(self.recommended_adjustments),
        }


def _weight_change_kg(goal_entities: Dict[str, Any]) -> Optional[float]:
    raw = goal_entities.get("target_weight_change_kg")
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def assess_feasibility(
    category: GoalCategory,
    weeks_to_goal: int,
    goal_entities: Optional[Dict[str, Any]] = None,
) -> FeasibilityAssessment:
    goal_entities = goal_entities or {}

    if category == GoalCategory.ENDURANCE_EVENT and weeks_to_goal < MIN_ENDURANCE_EVENT_WEEKS:
        return FeasibilityAssessment(
            is_feasible=False,
            risk_level=RiskLevel.HIGH,
            recommended_adjustments=[
                f"Extend timeline to at least {MIN_ENDURANCE_EVENT_WEEKS} weeks for safe endurance training"
            ],
        )

    if category == GoalCategory.BODY_COMP:
        change = _weight_change_kg(goal_entities)
        # A zero change carries no rate risk
        if change:
            required_weeks = math.ceil(abs(change) / SAFE_WEEKLY_WEIGHT_CHANGE_KG)
            if weeks_to_goal < required_weeks:
                return FeasibilityAssessment(
                    is_feasible=False,
                    risk_level=RiskLevel.HIGH,
                    recommended_adjustments=[
                        f"Extend timeline to {required_weeks} weeks for safe weight change "
                        f"({SAFE_WEEKLY_WEIGHT_CHANGE_KG}kg/week max)"
                    ],
                )

    return FeasibilityAssessment(is_feasible=True, risk_level=RiskLevel.LOW)
