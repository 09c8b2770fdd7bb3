"""
Goal metric and user profile types.

A GoalMetric moves through exactly one of these states during enrichment:

    UNENRICHED -> RESOLVED           (catalog standard found)
    UNENRICHED -> ESTIMATED          (no standard, current value known)
    UNENRICHED -> PENDING_DISCOVERY  (no standard, no current value)

State changes go through resolve() / estimate() / mark_pending_discovery()
so target fields are never set piecemeal.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import DEFAULT_METRICS, Direction, GoalCategory

PENDING_DISCOVERY_SOURCE = "pending_discovery"
ESTIMATED_SOURCE = "estimated"


class TargetStatus(str, Enum):
    UNENRICHED = "unenriched"
    RESOLVED = "resolved"
    ESTIMATED = "estimated"
    PENDING_DISCOVERY = "pending_discovery"


@dataclass
class GoalMetric:
    metric_key: str
    label: str
    unit: Optional[str] = None
    current_value: Optional[float] = None
    baseline_value: Optional[float] = None
    direction: Direction = Direction.INCREASE

    target_value: Optional[float] = None
    confidence: Optional[float] = None
    target_source: Optional[str] = None
    target_description: Optional[str] = None
    target_status: TargetStatus = TargetStatus.UNENRICHED

    @property
    def starting_value(self) -> Optional[float]:
        """Current value, falling back to the recorded baseline."""
        if self.current_value is not None:
            return self.current_value
        return self.baseline_value

    @property
    def has_target(self) -> bool:
        return self.target_status in (TargetStatus.RESOLVED, TargetStatus.ESTIMATED)

    def resolve(self, target_value: float, confidence: float, source_id: str, description: str) -> None:
        self.target_value = float(target_value)
        self.confidence = confidence
        self.target_source = source_id
        self.target_description = description
        self.target_status = TargetStatus.RESOLVED

    def estimate(self, target_value: float, confidence: float, description: str) -> None:
        self.target_value = round(float(target_value), 2)
        self.confidence = confidence
        self.target_source = ESTIMATED_SOURCE
        self.target_description = description
        self.target_status = TargetStatus.ESTIMATED

    def mark_pending_discovery(self) -> None:
        self.target_value = None
        self.confidence = 0.0
        self.target_source = PENDING_DISCOVERY_SOURCE
        self.target_description = "Awaiting an evidence-based standard for this metric"
        self.target_status = TargetStatus.PENDING_DISCOVERY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metric_key": self.metric_key,
            "label": self.label,
            "unit": self.unit,
            "current_value": self.current_value,
            "baseline_value": self.baseline_value,
            "direction": self.direction.value,
            "target_value": self.target_value,
            "confidence": self.confidence,
            "target_source": self.target_source,
            "target_description": self.target_description,
            "target_status": self.target_status.value,
        }


@dataclass
class UserProfile:
    """Profile fields the standards lookup stratifies on."""
    age: int = 30
    gender: Optional[str] = None  # 'male' | 'female'
    bodyweight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    fitness_level: Optional[str] = None
    medical_conditions: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Gender is required; standards are sex-stratified."""
        return self.gender in ("male", "female")


@dataclass
class GeneratePlanInput:
    goal_id: str
    user_id: str
    goal_category: str
    display_name: str
    target_date: Optional[date] = None
    goal_entities: Dict[str, Any] = field(default_factory=dict)
    metrics: List[GoalMetric] = field(default_factory=list)
    user_profile: Optional[UserProfile] = None


def default_metrics_for(category: GoalCategory) -> List[GoalMetric]:
    """Fresh, unenriched copies of the canonical metrics tracked for a goal category."""
    return [
        GoalMetric(metric_key=m.metric_key, label=m.label, unit=m.unit, direction=m.direction)
        for m in DEFAULT_METRICS.get(category, [])
    ]
