"""
Goal Plan Generator

Orchestrates one plan-generation request:

    enrich metrics -> milestones -> plans -> feasibility -> safety warnings

Stages run in order and each falls back locally, so the caller always gets
a complete GeneratedPlan. The only fatal path is an unknown goal category.

Usage:
    generator = GoalPlanGenerator(StandardsManager(db), get_text_synthesizer())
    plan = generator.generate(plan_input)
    persist_generated_plan(db, plan)
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from models import GoalMilestone, GoalPlan

from .constants import (
    DEFAULT_WEEKS_TO_GOAL,
    MIN_WEEKS_TO_GOAL,
    TRAINING_PLAN_CATEGORIES,
    parse_goal_category,
)
from .enrichment import DiscoveryDispatcher, EnrichmentReport, enrich_metrics
from .feasibility import FeasibilityAssessment, assess_feasibility
from .metrics import GeneratePlanInput, GoalMetric
from .milestones import MilestoneDraft, MilestoneGenerator
from .plan_assemblers import (
    NutritionPlanAssembler,
    PlanDocument,
    SupplementPlanAssembler,
    TrainingPlanAssembler,
)
from .safety import compose_safety_warnings, default_safety_warnings
from .standards_manager import StandardsResolver
from .synthesizer import TextSynthesizer

logger = logging.getLogger(__name__)


class InvalidGoalCategoryError(ValueError):
    """The request names a goal category the engine does not know."""

    def __init__(self, goal_category: str):
        super().__init__(f"Invalid goal type: {goal_category}")
        self.goal_category = goal_category


@dataclass
class GeneratedPlan:
    goal_id: str
    weeks_to_goal: int
    milestones: List[MilestoneDraft]
    safety_warnings: List[str]
    feasibility_assessment: FeasibilityAssessment
    metrics: List[GoalMetric] = field(default_factory=list)
    training_plan: Optional[PlanDocument] = None
    nutrition_plan: Optional[PlanDocument] = None
    supplement_plan: Optional[PlanDocument] = None
    profile_status: str = "complete"

    @property
    def plans(self) -> List[PlanDocument]:
        return [p for p in (self.training_plan, self.nutrition_plan, self.supplement_plan) if p is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "weeks_to_goal": self.weeks_to_goal,
            "profile_status": self.profile_status,
            "metrics": [m.to_dict() for m in self.metrics],
            "milestones": [m.to_dict() for m in self.milestones],
            "training_plan": self.training_plan.to_dict() if self.training_plan else None,
            "nutrition_plan": self.nutrition_plan.to_dict() if self.nutrition_plan else None,
            "supplement_plan": self.supplement_plan.to_dict() if self.supplement_plan else None,
            "safety_warnings": list(self.safety_warnings),
            "feasibility_assessment": self.feasibility_assessment.to_dict(),
        }


def weeks_until(target_date: Optional[date], today: date) -> int:
    """Whole weeks to the target date (rounded up, at least 4); 12 without one."""
    if target_date is None:
        return DEFAULT_WEEKS_TO_GOAL
    days = (target_date - today).days
    return max(MIN_WEEKS_TO_GOAL, math.ceil(days / 7))


def _default_discovery_dispatcher(metric_key: str, context: str) -> bool:
    # Celery app import is deferred so the service package stays importable without a broker config
    from tasks.standards_tasks import enqueue_standard_discovery

    return enqueue_standard_discovery(metric_key, context)


class GoalPlanGenerator:
    def __init__(
        self,
        resolver: StandardsResolver,
        synthesizer: Optional[TextSynthesizer],
        dispatch_discovery: Optional[DiscoveryDispatcher] = _default_discovery_dispatcher,
        today: Optional[date] = None,
    ):
        self.resolver = resolver
        self.synthesizer = synthesizer
        self.dispatch_discovery = dispatch_discovery
        self._today = today

        self.milestones = MilestoneGenerator(synthesizer)
        self.training = TrainingPlanAssembler(synthesizer)
        self.nutrition = NutritionPlanAssembler(synthesizer)
        self.supplements = SupplementPlanAssembler()

    @property
    def today(self) -> date:
        return self._today or date.today()

    def generate(self, plan_input: GeneratePlanInput) -> GeneratedPlan:
        try:
            category = parse_goal_category(plan_input.goal_category)
        except ValueError:
            raise InvalidGoalCategoryError(plan_input.goal_category) from None

        today = self.today
        weeks_to_goal = weeks_until(plan_input.target_date, today)

        logger.info(
            f"Generating plan for goal {plan_input.goal_id} ({category.value}, {weeks_to_goal} weeks)",
            extra={"extra_fields": {
                "goal_id": plan_input.goal_id,
                "user_id": plan_input.user_id,
                "category": category.value,
                "weeks_to_goal": weeks_to_goal,
                "metric_count": len(plan_input.metrics),
            }},
        )

        report = self._enrich(plan_input)
        milestones = self.milestones.generate(plan_input, category, weeks_to_goal, today)

        training_plan = None
        if category in TRAINING_PLAN_CATEGORIES:
            training_plan = self.training.assemble(plan_input, category, weeks_to_goal)
        nutrition_plan = self.nutrition.assemble(plan_input, category, weeks_to_goal)
        supplement_plan = self.supplements.assemble(plan_input, category, weeks_to_goal)

        feasibility = assess_feasibility(category, weeks_to_goal, plan_input.goal_entities)
        try:
            safety_warnings = compose_safety_warnings(category, feasibility)
        except Exception as e:
            logger.error(f"Error composing safety warnings for goal {plan_input.goal_id}: {e}", exc_info=True)
            safety_warnings = default_safety_warnings(category)

        return GeneratedPlan(
            goal_id=plan_input.goal_id,
            weeks_to_goal=weeks_to_goal,
            milestones=milestones,
            safety_warnings=safety_warnings,
            feasibility_assessment=feasibility,
            metrics=plan_input.metrics,
            training_plan=training_plan,
            nutrition_plan=nutrition_plan,
            supplement_plan=supplement_plan,
            profile_status=report.profile_status,
        )

    def _enrich(self, plan_input: GeneratePlanInput) -> EnrichmentReport:
        try:
            return enrich_metrics(plan_input, self.resolver, self.dispatch_discovery)
        except Exception as e:
            # Catalog unavailable (initialize or level lookup failed); metrics stay unenriched
            logger.error(f"Metric enrichment failed for goal {plan_input.goal_id}: {e}", exc_info=True)
            return EnrichmentReport()


def persist_generated_plan(db: Session, plan: GeneratedPlan) -> Dict[str, List[str]]:
    """
    Store milestones and plan documents for the goal.

    Earlier active plans of the same type for the goal are deactivated.
    Returns the new row ids.
    """
    milestone_rows = [
        GoalMilestone(
            goal_id=m.goal_id,
            title=m.title,
            description=m.description,
            due_date=m.due_date,
            completion_rule=m.completion_rule.to_dict() if m.completion_rule else None,
            status=m.status,
            progress_pct=m.progress_pct,
        )
        for m in plan.milestones
    ]

    plan_rows = []
    for doc in plan.plans:
        db.query(GoalPlan).filter(
            GoalPlan.goal_id == doc.goal_id,
            GoalPlan.plan_type == doc.plan_type.value,
            GoalPlan.is_active == 1,
        ).update({GoalPlan.is_active: 0}, synchronize_session=False)
        plan_rows.append(GoalPlan(
            goal_id=doc.goal_id,
            plan_type=doc.plan_type.value,
            period=doc.period,
            content_json=doc.content_json,
            version=doc.version,
            is_active=doc.is_active,
            source_prompt_hash=doc.source_prompt_hash,
        ))

    db.add_all(milestone_rows + plan_rows)
    db.commit()

    logger.info(
        f"Persisted {len(milestone_rows)} milestones and {len(plan_rows)} plans for goal {plan.goal_id}",
        extra={"extra_fields": {"goal_id": plan.goal_id}},
    )
    return {
        "milestone_ids": [str(r.id) for r in milestone_rows],
        "plan_ids": [str(r.id) for r in plan_rows],
    }
