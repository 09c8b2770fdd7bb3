"""
Tests for the goal plan orchestrator.

End-to-end runs use the seeded SQLite catalog and either no synthesizer
or one that always fails; both must still produce a complete plan.
"""
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import pytest

from models import GoalMilestone, GoalPlan
from services.goal_plans.generator import (
    GoalPlanGenerator,
    InvalidGoalCategoryError,
    persist_generated_plan,
    weeks_until,
)
from services.goal_plans.metrics import GoalMetric, TargetStatus, UserProfile
from services.goal_plans.plan_assemblers import TrainingPlanContent
from services.goal_plans.safety import DISCLAIMERS, TIMELINE_CONCERN
from services.goal_plans.standards_manager import StandardsManager
from tests.goal_plan_helpers import FailingSynthesizer

TODAY = date(2025, 1, 6)


@pytest.fixture
def generator(db_session):
    return GoalPlanGenerator(StandardsManager(db_session), None, dispatch_discovery=MagicMock(), today=TODAY)


class TestWeeksToGoal:
    def test_default_without_target_date(self):
        assert weeks_until(None, TODAY) == 12

    def test_rounds_up(self):
        assert weeks_until(TODAY + timedelta(days=71), TODAY) == 11

    def test_floor_of_four_weeks(self):
        assert weeks_until(TODAY + timedelta(days=3), TODAY) == 4
        assert weeks_until(TODAY - timedelta(days=30), TODAY) == 4


class TestCategoryValidation:
    def test_unknown_category_is_fatal(self, generator, make_plan_input):
        with pytest.raises(InvalidGoalCategoryError) as exc:
            generator.generate(make_plan_input(goal_category="space_travel"))
        assert exc.value.goal_category == "space_travel"


class TestPlanComposition:
    def test_strength_goal_has_all_plans(self, generator, make_plan_input):
        squat = GoalMetric("squat_1rm", "1RM Squat", "kg", current_value=100.0)

        plan = generator.generate(make_plan_input(metrics=[squat]))

        assert plan.weeks_to_goal == 12
        assert plan.training_plan is not None
        assert plan.nutrition_plan is not None
        assert plan.supplement_plan is not None
        assert len(plan.milestones) == 3
        assert squat.target_status == TargetStatus.RESOLVED
        assert plan.profile_status == "complete"

    @pytest.mark.parametrize("category", ["body_comp", "habit", "health_marker"])
    def test_no_training_plan_outside_training_categories(self, generator, make_plan_input, category):
        plan = generator.generate(make_plan_input(goal_category=category))
        assert plan.training_plan is None
        assert plan.nutrition_plan is not None
        assert plan.supplement_plan is not None

    def test_short_endurance_timeline_flagged(self, generator, make_plan_input):
        plan = generator.generate(make_plan_input(
            goal_category="endurance_event",
            display_name="Run a marathon",
            target_date=TODAY + timedelta(weeks=8),
        ))

        assert plan.weeks_to_goal == 8
        assert plan.feasibility_assessment.is_feasible is False
        assert plan.safety_warnings[:2] == list(DISCLAIMERS)
        assert TIMELINE_CONCERN in plan.safety_warnings

    def test_missing_gender_still_returns_plan(self, generator, make_plan_input):
        squat = GoalMetric("squat_1rm", "1RM Squat", "kg", current_value=100.0)

        plan = generator.generate(make_plan_input(metrics=[squat], user_profile=UserProfile(age=30)))

        assert plan.profile_status == "insufficient_profile"
        assert squat.target_status == TargetStatus.UNENRICHED
        assert len(plan.milestones) == 3


class TestResilience:
    def test_every_generative_call_failing_still_yields_complete_plan(self, db_session, make_plan_input):
        synth = FailingSynthesizer()
        generator = GoalPlanGenerator(StandardsManager(db_session), synth, dispatch_discovery=MagicMock(), today=TODAY)

        plan = generator.generate(make_plan_input(goal_category="hybrid", display_name="Hyrox"))

        # milestones + training + nutrition
        assert synth.calls == 3
        assert plan.training_plan.source == "fallback"
        TrainingPlanContent.model_validate(plan.training_plan.content_json)
        assert plan.nutrition_plan.source == "fallback"
        assert len(plan.milestones) >= 3

    def test_unexpected_synthesizer_exception_still_yields_complete_plan(self, db_session, make_plan_input):
        synth = FailingSynthesizer(RuntimeError("connection reset"))
        generator = GoalPlanGenerator(StandardsManager(db_session), synth, dispatch_discovery=None, today=TODAY)

        plan = generator.generate(make_plan_input())

        assert synth.calls == 3
        assert [p.source for p in plan.plans] == ["fallback", "fallback", "static"]
        TrainingPlanContent.model_validate(plan.training_plan.content_json)
        assert len(plan.milestones) == 3

    def test_enrichment_failure_is_contained(self, make_plan_input):
        resolver = MagicMock()
        resolver.initialize.side_effect = RuntimeError("catalog unavailable")
        generator = GoalPlanGenerator(resolver, None, dispatch_discovery=None, today=TODAY)
        squat = GoalMetric("squat_1rm", "1RM Squat", "kg", current_value=100.0)

        plan = generator.generate(make_plan_input(metrics=[squat]))

        assert squat.target_status == TargetStatus.UNENRICHED
        assert plan.training_plan is not None

    def test_safety_composer_failure_uses_defaults(self, generator, make_plan_input):
        with patch(
            "services.goal_plans.generator.compose_safety_warnings",
            side_effect=RuntimeError("boom"),
        ):
            plan = generator.generate(make_plan_input(goal_category="strength"))

        assert plan.safety_warnings[:2] == list(DISCLAIMERS)
        assert "proper form" in plan.safety_warnings[-1]

    def test_discovery_dispatched_for_unknown_metric(self, db_session, make_plan_input):
        dispatch = MagicMock()
        generator = GoalPlanGenerator(StandardsManager(db_session), None, dispatch_discovery=dispatch, today=TODAY)

        generator.generate(make_plan_input(metrics=[GoalMetric("grip_strength", "Grip", "kg", current_value=40.0)]))

        dispatch.assert_called_once_with("grip_strength", "Get stronger - Grip")


class TestSerialization:
    def test_to_dict_shape(self, generator, make_plan_input):
        plan = generator.generate(make_plan_input(
            goal_category="body_comp",
            goal_entities={"target_weight_change_kg": -4},
            metrics=[GoalMetric("body_fat_pct", "Body Fat %", "%", current_value=22.0)],
        ))

        data = plan.to_dict()

        assert set(data) >= {
            "milestones", "training_plan", "nutrition_plan", "supplement_plan",
            "safety_warnings", "feasibility_assessment",
        }
        assert data["training_plan"] is None
        assert data["feasibility_assessment"]["is_feasible"] is True
        assert data["metrics"][0]["target_status"] == "resolved"
        assert data["milestones"][0]["due_date"] == "2025-02-03"


class TestPersistence:
    def test_writes_milestones_and_plans(self, db_session, generator, make_plan_input):
        plan = generator.generate(make_plan_input())

        ids = persist_generated_plan(db_session, plan)

        assert len(ids["milestone_ids"]) == 3
        assert len(ids["plan_ids"]) == 3
        assert db_session.query(GoalMilestone).filter_by(goal_id="goal-1").count() == 3
        rows = db_session.query(GoalPlan).filter_by(goal_id="goal-1").all()
        assert {r.plan_type for r in rows} == {"training", "nutrition", "supplements"}
        assert all(r.is_active == 1 and r.period == "weekly" for r in rows)

    def test_regeneration_deactivates_previous_plans(self, db_session, generator, make_plan_input):
        persist_generated_plan(db_session, generator.generate(make_plan_input()))
        persist_generated_plan(db_session, generator.generate(make_plan_input()))

        active = db_session.query(GoalPlan).filter_by(goal_id="goal-1", is_active=1).count()
        inactive = db_session.query(GoalPlan).filter_by(goal_id="goal-1", is_active=0).count()
        assert active == 3
        assert inactive == 3

    def test_prompt_hash_is_stored(self, db_session, generator, make_plan_input):
        plan = generator.generate(make_plan_input())
        plan.training_plan.source_prompt_hash = "a" * 64

        persist_generated_plan(db_session, plan)

        rows = {r.plan_type: r for r in db_session.query(GoalPlan).filter_by(goal_id="goal-1")}
        assert rows["training"].source_prompt_hash == "a" * 64
        assert rows["nutrition"].source_prompt_hash is None
