"""
Safety Warning Composer

Ordered warnings: the two standing disclaimers, a timeline concern when the
plan is infeasible, then one category-specific caution.
"""

from typing import List

from .constants import GoalCategory
from .feasibility import FeasibilityAssessment

DISCLAIMERS = (
    "This plan is for informational purposes only and does not constitute medical advice.",
    "Consult a healthcare professional before starting any new exercise or nutrition program.",
)

TIMELINE_CONCERN = (
    "TIMELINE CONCERN: The current timeline may be too aggressive. "
    "Consider the recommended adjustments."
)

CATEGORY_CAUTIONS = {
    GoalCategory.ENDURANCE_EVENT: (
        "Monitor for signs of overtraining: persistent fatigue, elevated resting HR, decreased HRV."
    ),
    GoalCategory.HEALTH_MARKER: (
        "MEDICAL: Work with your healthcare provider to monitor biomarker changes."
    ),
    GoalCategory.STRENGTH: (
        "Use proper form to avoid injury. Consider working with a qualified trainer."
    ),
    GoalCategory.BODY_COMP: (
        "Aim for gradual, sustainable changes (0.5-1kg per week for weight loss)."
    ),
}


def default_safety_warnings(category: GoalCategory) -> List[str]:
    """Disclaimers plus the category caution, without any feasibility input."""
    warnings = list(DISCLAIMERS)
    caution = CATEGORY_CAUTIONS.get(category)
    if caution:
        warnings.append(caution)
    return warnings


def compose_safety_warnings(category: GoalCategory, feasibility: FeasibilityAssessment) -> List[str]:
    warnings = list(DISCLAIMERS)
    if not feasibility.is_feasible:
        warnings.append(TIMELINE_CONCERN)
    caution = CATEGORY_CAUTIONS.get(category)
    if caution:
        warnings.append(caution)
    return warnings
