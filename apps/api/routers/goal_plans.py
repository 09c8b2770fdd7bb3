"""
Goal Plans API Router

Endpoints for:
- Generating a comprehensive goal plan (milestones, plans, safety guidance)
- Checking a standards source against the evidence tiers
- Listing AI-discovered standards awaiting admin review
- Looking up the canonical metrics for a goal category
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from core.database import get_db
from core.exceptions import ValidationError
from models import MetricStandard
from services.goal_plans import (
    Direction,
    GeneratePlanInput,
    GoalMetric,
    GoalPlanGenerator,
    InvalidGoalCategoryError,
    StandardsManager,
    UserProfile,
    default_metrics_for,
    get_text_synthesizer,
    parse_goal_category,
    persist_generated_plan,
    validate_source,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/goal-plans", tags=["Goal Plans"])


# ============ Request Models ============

class MetricRequest(BaseModel):
    metric_key: str = Field(..., min_length=1)
    label: str
    unit: Optional[str] = None
    current_value: Optional[float] = None
    baseline_value: Optional[float] = None
    direction: Direction = Direction.INCREASE


class UserProfileRequest(BaseModel):
    age: int = Field(30, ge=1, le=120)
    gender: Optional[str] = Field(None, description="male or female; required for standards lookup")
    bodyweight_kg: Optional[float] = Field(None, gt=0)
    height_cm: Optional[float] = Field(None, gt=0)
    fitness_level: Optional[str] = None
    medical_conditions: List[str] = Field(default_factory=list)


class GeneratePlanRequest(BaseModel):
    goal_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    goal_category: str = Field(..., description="endurance_event, body_comp, strength, habit, health_marker, hybrid")
    display_name: str = Field(..., min_length=1)
    target_date: Optional[date] = None
    goal_entities: Dict[str, Any] = Field(default_factory=dict)
    metrics: List[MetricRequest] = Field(default_factory=list)
    user_profile: Optional[UserProfileRequest] = None

    def to_plan_input(self) -> GeneratePlanInput:
        return GeneratePlanInput(
            goal_id=self.goal_id,
            user_id=self.user_id,
            goal_category=self.goal_category,
            display_name=self.display_name,
            target_date=self.target_date,
            goal_entities=dict(self.goal_entities),
            metrics=[GoalMetric(**m.model_dump()) for m in self.metrics],
            user_profile=UserProfile(**self.user_profile.model_dump()) if self.user_profile else None,
        )


class ValidateSourceRequest(BaseModel):
    source_name: str = Field(..., min_length=1)
    claimed_evidence_level: Optional[str] = None


# ============ Dependencies ============

def get_goal_plan_generator(db: Session = Depends(get_db)) -> GoalPlanGenerator:
    return GoalPlanGenerator(StandardsManager(db), get_text_synthesizer())


# ============ Endpoints ============

@router.post("/generate", response_model=Dict[str, Any])
def generate_goal_plan(
    request: GeneratePlanRequest,
    persist: bool = Query(False, description="Store milestones and plans"),
    db: Session = Depends(get_db),
    generator: GoalPlanGenerator = Depends(get_goal_plan_generator),
):
    """
    Generate milestones, plans, feasibility and safety warnings for a goal.

    Generative failures fall back to deterministic content; only an unknown
    goal category is rejected.
    """
    try:
        plan = generator.generate(request.to_plan_input())
    except InvalidGoalCategoryError as e:
        raise ValidationError(str(e), field="goal_category") from e

    result = plan.to_dict()
    if persist:
        result["persisted"] = persist_generated_plan(db, plan)
    return result


@router.post("/standards/validate-source")
def validate_standard_source(request: ValidateSourceRequest):
    """Grade a source name against the evidence tiers."""
    validation = validate_source(request.source_name, request.claimed_evidence_level)
    return {
        "source_name": request.source_name,
        "is_reputable": validation.is_reputable,
        "evidence_level": validation.evidence_level.value,
        "confidence_score": validation.confidence_score,
        "reason": validation.reason,
    }


@router.get("/standards/pending-review")
def list_pending_standards(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """AI-discovered standards not yet verified by an admin, newest first."""
    rows = (
        db.query(MetricStandard)
        .filter(MetricStandard.verified_by_admin.is_(False), MetricStandard.is_active.is_(True))
        .order_by(MetricStandard.created_at.desc())
        .limit(limit)
        .all()
    )
    return {
        "count": len(rows),
        "standards": [
            {
                "id": str(r.id),
                "metric_key": r.metric_key,
                "standard_type": r.standard_type,
                "category": r.category,
                "gender": r.gender,
                "age_min": r.age_min,
                "age_max": r.age_max,
                "value_min": r.value_min,
                "value_max": r.value_max,
                "value_single": r.value_single,
                "unit": r.unit,
                "percentile": r.percentile,
                "level": r.level,
                "source_name": r.source_name,
                "source_url": r.source_url,
                "confidence_score": r.confidence_score,
                "evidence_level": r.evidence_level,
            }
            for r in rows
        ],
    }


@router.get("/default-metrics/{goal_category}")
def get_default_metrics(goal_category: str):
    """Canonical metrics to prefill for a new goal of this category."""
    try:
        category = parse_goal_category(goal_category)
    except ValueError as e:
        raise ValidationError(str(e), field="goal_category") from e
    return {
        "goal_category": category.value,
        "metrics": [m.to_dict() for m in default_metrics_for(category)],
    }
