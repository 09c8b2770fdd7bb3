"""
Constants for goal plan generation.

Goal categories, their default metrics and milestone templates, and the
numeric limits the engine's safety heuristics depend on.
"""

from enum import Enum
from typing import Dict, List, NamedTuple


class GoalCategory(str, Enum):
    """Canonical goal categories every natural-language goal maps to."""
    ENDURANCE_EVENT = "endurance_event"
    BODY_COMP = "body_comp"
    STRENGTH = "strength"
    HABIT = "habit"
    HEALTH_MARKER = "health_marker"
    HYBRID = "hybrid"


class Direction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    MAINTAIN = "maintain"
    ACHIEVE = "achieve"


class EvidenceLevel(str, Enum):
    PEER_REVIEWED = "peer_reviewed"
    PROFESSIONAL_ORG = "professional_org"
    AI_DISCOVERED = "ai_discovered"
    COMMUNITY = "community"


class PlanType(str, Enum):
    TRAINING = "training"
    NUTRITION = "nutrition"
    SUPPLEMENTS = "supplements"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class DefaultMetric(NamedTuple):
    metric_key: str
    label: str
    unit: str
    direction: Direction


# =============================================================================
# TIMELINE
# =============================================================================

DEFAULT_WEEKS_TO_GOAL = 12      # No target date given
MIN_WEEKS_TO_GOAL = 4           # Floor applied to any target date

MIN_MILESTONES = 3
MAX_MILESTONES = 6
WEEKS_PER_MILESTONE = 4

# =============================================================================
# SAFETY LIMITS
# =============================================================================

MIN_ENDURANCE_EVENT_WEEKS = 12
SAFE_WEEKLY_WEIGHT_CHANGE_KG = 0.5

# Interim target when no standard resolves (10% toward the desired direction)
ESTIMATED_INCREASE_FACTOR = 1.1
ESTIMATED_DECREASE_FACTOR = 0.9
ESTIMATED_TARGET_CONFIDENCE = 0.5

# Unknown start value: assume we are 80% of the way there
UNKNOWN_START_FRACTION = 0.8

# =============================================================================
# PLANS
# =============================================================================

TRAINING_PLAN_CATEGORIES = frozenset({
    GoalCategory.ENDURANCE_EVENT,
    GoalCategory.STRENGTH,
    GoalCategory.HYBRID,
})

# Bumped whenever the content_json shape of a plan type changes.
PLAN_SCHEMA_VERSIONS: Dict[PlanType, int] = {
    PlanType.TRAINING: 1,
    PlanType.NUTRITION: 1,
    PlanType.SUPPLEMENTS: 1,
}

# Fallback periodization: foundation / progressive overload / taper (remainder)
FALLBACK_PHASE_SPLIT = (0.4, 0.4)

# =============================================================================
# CANONICAL GOAL TYPES
# =============================================================================

DEFAULT_METRICS: Dict[GoalCategory, List[DefaultMetric]] = {
    GoalCategory.ENDURANCE_EVENT: [
        DefaultMetric("vo2max", "VO2 Max", "ml/kg/min", Direction.INCREASE),
        DefaultMetric("weekly_distance_km", "Weekly Distance", "km", Direction.INCREASE),
        DefaultMetric("long_run_distance_km", "Long Run Distance", "km", Direction.INCREASE),
        DefaultMetric("resting_hr", "Resting Heart Rate", "bpm", Direction.DECREASE),
        DefaultMetric("hrv", "Heart Rate Variability", "ms", Direction.INCREASE),
    ],
    GoalCategory.BODY_COMP: [
        DefaultMetric("body_weight", "Body Weight", "kg", Direction.ACHIEVE),
        DefaultMetric("body_fat_pct", "Body Fat %", "%", Direction.DECREASE),
        DefaultMetric("lean_mass", "Lean Mass", "kg", Direction.INCREASE),
        DefaultMetric("waist_circumference", "Waist Circumference", "cm", Direction.DECREASE),
    ],
    GoalCategory.STRENGTH: [
        DefaultMetric("squat_1rm", "1RM Squat", "kg", Direction.INCREASE),
        DefaultMetric("deadlift_1rm", "1RM Deadlift", "kg", Direction.INCREASE),
        DefaultMetric("bench_press_1rm", "1RM Bench Press", "kg", Direction.INCREASE),
        DefaultMetric("total_volume", "Weekly Training Volume", "kg", Direction.INCREASE),
    ],
    GoalCategory.HABIT: [
        DefaultMetric("habit_completion_rate", "Completion Rate", "%", Direction.INCREASE),
        DefaultMetric("streak_days", "Current Streak", "days", Direction.INCREASE),
    ],
    GoalCategory.HEALTH_MARKER: [
        DefaultMetric("resting_hr", "Resting Heart Rate", "bpm", Direction.DECREASE),
        DefaultMetric("ldl_cholesterol", "LDL Cholesterol", "mmol/L", Direction.DECREASE),
        DefaultMetric("hdl_cholesterol", "HDL Cholesterol", "mmol/L", Direction.INCREASE),
        DefaultMetric("fasting_glucose", "Fasting Glucose", "mmol/L", Direction.DECREASE),
        DefaultMetric("blood_pressure_sys", "Systolic BP", "mmHg", Direction.DECREASE),
    ],
    GoalCategory.HYBRID: [
        DefaultMetric("custom_metric_1", "Primary Metric", "varies", Direction.ACHIEVE),
        DefaultMetric("custom_metric_2", "Secondary Metric", "varies", Direction.ACHIEVE),
    ],
}

# Every template has at least MIN_MILESTONES entries.
DEFAULT_MILESTONES: Dict[GoalCategory, List[str]] = {
    GoalCategory.ENDURANCE_EVENT: [
        "Long run reaches 75% of race distance",
        "VO2max improves by 10%",
        "Consistent training for 8+ weeks",
        "Complete race simulation workout",
        "Taper period begins",
    ],
    GoalCategory.BODY_COMP: [
        "Achieve 25% of weight goal",
        "Achieve 50% of weight goal",
        "Achieve 75% of weight goal",
        "Maintain target weight for 2 weeks",
        "Maintain target weight for 4 weeks",
        "Complete body scan reassessment",
    ],
    GoalCategory.STRENGTH: [
        "Complete 4-week strength foundation block",
        "Complete 8-week progressive overload cycle",
        "Add +10% to 1RM in key lifts",
        "Achieve strength balance (reduce left/right asymmetry)",
        "Complete deload week",
        "Test new 1RM maxes",
    ],
    GoalCategory.HABIT: [
        "Achieve 7-day streak",
        "Achieve 14-day streak",
        "Achieve 30-day streak",
        "Achieve 60-day streak",
        "Reach 90% habit adherence over 30 days",
        "Reach 90% habit adherence over 60 days",
    ],
    GoalCategory.HEALTH_MARKER: [
        "Initial baseline values recorded",
        "First follow-up shows improvement",
        "Target value achieved",
        "Stable results for 1 month",
        "Stable results for 3 months",
        "Physician confirmation of improvement",
    ],
    GoalCategory.HYBRID: [
        "Phase 1: Foundation established",
        "Phase 2: Progressive overload/adaptation",
        "Phase 3: Peak performance/maintenance",
        "Cross-domain balance confirmed",
    ],
}

GENERIC_MILESTONES = [
    "Foundation phase complete",
    "Progressive improvement phase complete",
    "Final preparation complete",
]


def parse_goal_category(value: str) -> GoalCategory:
    """Strict lookup; raises ValueError for unknown categories."""
    return GoalCategory(value)


def requested_milestone_count(weeks_to_goal: int) -> int:
    return min(MAX_MILESTONES, max(MIN_MILESTONES, weeks_to_goal // WEEKS_PER_MILESTONE))
