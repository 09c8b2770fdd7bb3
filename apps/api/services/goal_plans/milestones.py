"""
Milestone Generator

3-6 progressive milestones with due dates, optionally gated on a metric
threshold taken from the weekly progression.

Primary path asks the synthesizer; the reply must pass validation (count,
strictly increasing dates inside the plan window) or it is discarded.
Fallback spaces the category's default milestone titles evenly across the
window with no completion rules.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from .constants import (
    DEFAULT_MILESTONES,
    GENERIC_MILESTONES,
    MAX_MILESTONES,
    MIN_MILESTONES,
    GoalCategory,
    requested_milestone_count,
)
from .metrics import GeneratePlanInput
from .progression import build_progression
from .synthesizer import SynthesisError, TextSynthesizer

logger = logging.getLogger(__name__)

PROGRESSION_PREVIEW_WEEKS = 3


@dataclass
class CompletionRule:
    type: str
    metric_key: str
    operator: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "metric_key": self.metric_key, "operator": self.operator, "value": self.value}


@dataclass
class MilestoneDraft:
    goal_id: str
    title: str
    due_date: date
    description: Optional[str] = None
    completion_rule: Optional[CompletionRule] = None
    status: str = "pending"
    progress_pct: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date.isoformat(),
            "completion_rule": self.completion_rule.to_dict() if self.completion_rule else None,
            "status": self.status,
            "progress_pct": self.progress_pct,
        }


class _CompletionRuleModel(BaseModel):
    type: Literal["metric_threshold"]
    metric_key: str
    operator: Literal[">=", "<=", ">", "<", "=="]
    value: float


class _MilestoneModel(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    due_date: date
    completion_rule: Optional[Dict[str, Any]] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _date_part(cls, v):
        # Models sometimes send a full timestamp
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v


class _MilestoneResponse(BaseModel):
    milestones: List[_MilestoneModel]


def milestone_window_end(today: date, target_date: Optional[date], weeks_to_goal: int, count: int) -> date:
    """
    Last allowed due date.

    The target date when it leaves room for `count` distinct days, otherwise
    the end of the weeks_to_goal horizon.
    """
    if target_date is not None and (target_date - today).days >= count:
        return target_date
    return today + timedelta(weeks=weeks_to_goal)


def evenly_spaced_dates(today: date, end: date, count: int) -> List[date]:
    """`count` strictly increasing dates in (today, end], the last equal to end."""
    span_days = (end - today).days
    return [today + timedelta(days=(i + 1) * span_days // count) for i in range(count)]


class MilestoneGenerator:
    def __init__(self, synthesizer: Optional[TextSynthesizer]):
        self.synthesizer = synthesizer

    def generate(
        self,
        plan_input: GeneratePlanInput,
        category: GoalCategory,
        weeks_to_goal: int,
        today: date,
    ) -> List[MilestoneDraft]:
        count = requested_milestone_count(weeks_to_goal)
        window_end = milestone_window_end(today, plan_input.target_date, weeks_to_goal, count)

        if self.synthesizer is None:
            return self.fallback(plan_input, category, weeks_to_goal, today)

        try:
            raw = self.synthesizer.complete(
                {"milestones": [_MILESTONE_SHAPE]},
                self._system_prompt(plan_input, category, weeks_to_goal, count, window_end),
                f"Generate milestones for: {plan_input.display_name}. "
                f"Entities: {plan_input.goal_entities}",
            )
            return self._parse(raw, plan_input, today, window_end)
        except (SynthesisError, PydanticValidationError, ValueError) as e:
            logger.warning(
                f"Milestone generation failed for goal {plan_input.goal_id}, using defaults: {e}",
                extra={"extra_fields": {"goal_id": plan_input.goal_id, "stage": "milestones"}},
            )
            return self.fallback(plan_input, category, weeks_to_goal, today)
        except Exception as e:
            logger.error(
                f"Unexpected error generating milestones for goal {plan_input.goal_id}, using defaults: {e}",
                exc_info=True,
                extra={"extra_fields": {"goal_id": plan_input.goal_id, "stage": "milestones"}},
            )
            return self.fallback(plan_input, category, weeks_to_goal, today)

    def fallback(
        self,
        plan_input: GeneratePlanInput,
        category: GoalCategory,
        weeks_to_goal: int,
        today: date,
    ) -> List[MilestoneDraft]:
        template = DEFAULT_MILESTONES.get(category) or GENERIC_MILESTONES
        count = min(len(template), requested_milestone_count(weeks_to_goal))
        window_end = milestone_window_end(today, plan_input.target_date, weeks_to_goal, count)
        due_dates = evenly_spaced_dates(today, window_end, count)

        return [
            MilestoneDraft(goal_id=plan_input.goal_id, title=title, due_date=due)
            for title, due in zip(template[:count], due_dates)
        ]

    def _parse(
        self,
        raw: Dict[str, Any],
        plan_input: GeneratePlanInput,
        today: date,
        window_end: date,
    ) -> List[MilestoneDraft]:
        parsed = _MilestoneResponse.model_validate(raw)
        items = parsed.milestones

        if not MIN_MILESTONES <= len(items) <= MAX_MILESTONES:
            raise ValueError(f"expected {MIN_MILESTONES}-{MAX_MILESTONES} milestones, got {len(items)}")

        previous = None
        for item in items:
            if item.due_date < today or item.due_date > window_end:
                raise ValueError(f"due date {item.due_date} outside {today}..{window_end}")
            if previous is not None and item.due_date <= previous:
                raise ValueError("due dates are not strictly increasing")
            previous = item.due_date

        known_metrics = {m.metric_key for m in plan_input.metrics}
        return [
            MilestoneDraft(
                goal_id=plan_input.goal_id,
                title=item.title,
                description=item.description,
                due_date=item.due_date,
                completion_rule=_completion_rule(item.completion_rule, known_metrics),
            )
            for item in items
        ]

    def _system_prompt(
        self,
        plan_input: GeneratePlanInput,
        category: GoalCategory,
        weeks_to_goal: int,
        count: int,
        window_end: date,
    ) -> str:
        metric_lines = []
        progression_lines = []
        for m in plan_input.metrics:
            current = m.starting_value if m.starting_value is not None else "unknown"
            if m.has_target:
                metric_lines.append(
                    f"- {m.label}: {current} -> {m.target_value} {m.unit or ''} (Source: {m.target_source})"
                )
                preview = build_progression(m.starting_value, m.target_value, weeks_to_goal)[:PROGRESSION_PREVIEW_WEEKS]
                progression_lines.append(
                    f"{m.label} [{m.metric_key}]: {[c.to_dict() for c in preview]}... "
                    f"(showing first {PROGRESSION_PREVIEW_WEEKS} weeks)"
                )
            else:
                metric_lines.append(f"- {m.label}: Currently {current} {m.unit or ''}")

        return f"""You are a goal planning assistant. Generate realistic, measurable milestones for a {category.value} goal.

GOAL: {plan_input.display_name}
TIMELINE: {weeks_to_goal} weeks
LAST ALLOWED DUE DATE: {window_end.isoformat()}

TRACKED METRICS WITH TARGETS:
{chr(10).join(metric_lines) or "None"}

METRIC PROGRESSIONS (Weekly Checkpoints):
{chr(10).join(progression_lines) or "None"}

DEFAULT MILESTONES FOR THIS GOAL TYPE:
{DEFAULT_MILESTONES.get(category, GENERIC_MILESTONES)}

TASK:
1. Create {count} progressive milestones
2. Space them evenly across the timeline (about every {max(1, weeks_to_goal // count)} weeks)
3. Make each milestone specific and measurable using the metric progressions above
4. Use actual numeric thresholds from the progressions for completion rules
5. Start with foundation, build to peak, include taper if applicable
6. Due dates must be ISO-8601 dates, strictly increasing, no later than the last allowed due date"""


_MILESTONE_SHAPE = {
    "title": "Milestone title",
    "description": "Detailed description",
    "due_date": "YYYY-MM-DD",
    "completion_rule": {
        "type": "metric_threshold",
        "metric_key": "weekly_distance_km",
        "operator": ">=",
        "value": 40,
    },
}


def _completion_rule(raw: Optional[Dict[str, Any]], known_metrics: set) -> Optional[CompletionRule]:
    """Keep a rule only if it is well formed and refers to a tracked metric."""
    if not raw:
        return None
    try:
        rule = _CompletionRuleModel.model_validate(raw)
    except PydanticValidationError:
        return None
    if rule.metric_key not in known_metrics:
        return None
    return CompletionRule(type=rule.type, metric_key=rule.metric_key, operator=rule.operator, value=rule.value)
