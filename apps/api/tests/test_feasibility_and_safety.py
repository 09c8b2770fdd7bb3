"""
Tests for the feasibility assessor and safety warning composer.
"""
from services.goal_plans.constants import GoalCategory, RiskLevel
from services.goal_plans.feasibility import FeasibilityAssessment, assess_feasibility
from services.goal_plans.safety import (
    DISCLAIMERS,
    TIMELINE_CONCERN,
    compose_safety_warnings,
    default_safety_warnings,
)


class TestEnduranceTimeline:
    def test_under_twelve_weeks_is_infeasible(self):
        result = assess_feasibility(GoalCategory.ENDURANCE_EVENT, 8, {})

        assert result.is_feasible is False
        assert result.risk_level == RiskLevel.HIGH
        assert result.recommended_adjustments == [
            "Extend timeline to at least 12 weeks for safe endurance training"
        ]

    def test_twelve_weeks_is_feasible(self):
        result = assess_feasibility(GoalCategory.ENDURANCE_EVENT, 12, {})
        assert result.is_feasible is True
        assert result.risk_level == RiskLevel.LOW


class TestBodyCompRate:
    def test_loss_faster_than_half_kg_per_week_is_infeasible(self):
        result = assess_feasibility(GoalCategory.BODY_COMP, 8, {"target_weight_change_kg": -10})

        assert result.is_feasible is False
        assert result.risk_level == RiskLevel.HIGH
        assert "20 weeks" in result.recommended_adjustments[0]

    def test_required_weeks_round_up(self):
        result = assess_feasibility(GoalCategory.BODY_COMP, 4, {"target_weight_change_kg": 2.1})
        # ceil(2.1 / 0.5) = 5
        assert "5 weeks" in result.recommended_adjustments[0]

    def test_exactly_required_weeks_is_feasible(self):
        result = assess_feasibility(GoalCategory.BODY_COMP, 20, {"target_weight_change_kg": 10})
        assert result.is_feasible is True

    def test_no_weight_change_entity_is_feasible(self):
        assert assess_feasibility(GoalCategory.BODY_COMP, 4, {}).is_feasible is True

    def test_non_numeric_change_is_ignored(self):
        assert assess_feasibility(GoalCategory.BODY_COMP, 4, {"target_weight_change_kg": "lots"}).is_feasible is True


class TestOtherCategories:
    def test_habit_short_timeline_is_feasible(self):
        result = assess_feasibility(GoalCategory.HABIT, 4, None)
        assert result.is_feasible is True
        assert result.recommended_adjustments == []

    def test_to_dict(self):
        assert assess_feasibility(GoalCategory.STRENGTH, 4).to_dict() == {
            "is_feasible": True,
            "risk_level": "low",
            "recommended_adjustments": [],
        }


class TestSafetyWarnings:
    def test_disclaimers_always_first(self):
        warnings = compose_safety_warnings(GoalCategory.HABIT, FeasibilityAssessment(True, RiskLevel.LOW))
        assert warnings == list(DISCLAIMERS)

    def test_timeline_concern_when_infeasible(self):
        infeasible = assess_feasibility(GoalCategory.ENDURANCE_EVENT, 6, {})
        warnings = compose_safety_warnings(GoalCategory.ENDURANCE_EVENT, infeasible)

        assert warnings[:2] == list(DISCLAIMERS)
        assert warnings[2] == TIMELINE_CONCERN
        assert "overtraining" in warnings[3]
        assert len(warnings) == 4

    def test_category_cautions(self):
        feasible = FeasibilityAssessment(True, RiskLevel.LOW)
        assert "healthcare provider" in compose_safety_warnings(GoalCategory.HEALTH_MARKER, feasible)[-1]
        assert "proper form" in compose_safety_warnings(GoalCategory.STRENGTH, feasible)[-1]
        assert "sustainable" in compose_safety_warnings(GoalCategory.BODY_COMP, feasible)[-1]

    def test_default_warnings_have_no_timeline_concern(self):
        warnings = default_safety_warnings(GoalCategory.ENDURANCE_EVENT)
        assert TIMELINE_CONCERN not in warnings
        assert warnings[:2] == list(DISCLAIMERS)
        assert len(warnings) == 3
