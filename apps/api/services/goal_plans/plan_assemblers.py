"""
Plan Assemblers

Training, nutrition and supplement plan documents for a goal.

Each assembler:
1. Builds a category-specific prompt and asks the synthesizer
2. Validates the reply against its content schema
3. Falls back to a deterministic, schema-valid plan on any failure

Output is always a PlanDocument with period "weekly" and the content
schema version of its plan type.

Usage:
    assembler = TrainingPlanAssembler(get_text_synthesizer())
    doc = assembler.assemble(plan_input, GoalCategory.STRENGTH, weeks_to_goal=16)
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from .constants import (
    FALLBACK_PHASE_SPLIT,
    PLAN_SCHEMA_VERSIONS,
    GoalCategory,
    PlanType,
)
from .metrics import GeneratePlanInput
from .synthesizer import SynthesisError, TextSynthesizer

logger = logging.getLogger(__name__)

PLAN_PERIOD = "weekly"
SOURCE_GENERATED = "generated"
SOURCE_FALLBACK = "fallback"
SOURCE_STATIC = "static"

NUTRITION_DISCLAIMER = "Not medical advice. Nutrition guidance is for informational purposes only."
SUPPLEMENT_DISCLAIMER = (
    "Supplement recommendations are for informational purposes only. "
    "Consult a healthcare professional before starting any supplement regimen."
)


class PlanSchemaError(ValueError):
    """Synthesized plan content did not match the plan type's schema."""


@dataclass
class PlanDocument:
    goal_id: str
    plan_type: PlanType
    content_json: Dict[str, Any]
    version: int
    period: str = PLAN_PERIOD
    is_active: int = 1
    source: str = SOURCE_GENERATED
    # sha256 of the prompts a generated plan came from; None for fallback and static plans
    source_prompt_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "plan_type": self.plan_type.value,
            "period": self.period,
            "content_json": self.content_json,
            "version": self.version,
            "is_active": self.is_active,
            "source": self.source,
            "source_prompt_hash": self.source_prompt_hash,
        }


def prompt_hash(system_prompt: str, user_prompt: str) -> str:
    return hashlib.sha256(f"{system_prompt}\n{user_prompt}".encode()).hexdigest()


def _document(
    plan_input: GeneratePlanInput,
    plan_type: PlanType,
    content: Dict[str, Any],
    source: str,
    source_prompt_hash: Optional[str] = None,
) -> PlanDocument:
    return PlanDocument(
        goal_id=plan_input.goal_id,
        plan_type=plan_type,
        content_json=content,
        version=PLAN_SCHEMA_VERSIONS[plan_type],
        source=source,
        source_prompt_hash=source_prompt_hash,
    )


# =============================================================================
# CONTENT SCHEMAS
# =============================================================================

class TrainingSession(BaseModel):
    type: str = Field(min_length=1)
    duration: Optional[str] = None
    intensity: Optional[str] = None


class WeeklyStructure(BaseModel):
    days_per_week: int = Field(ge=1, le=7)
    sessions: List[TrainingSession] = Field(default_factory=list)
    note: Optional[str] = None


class TrainingPhase(BaseModel):
    name: str = Field(min_length=1)
    weeks: int = Field(ge=0)
    focus: str
    weekly_structure: WeeklyStructure


class TrainingPlanContent(BaseModel):
    program_name: str = Field(min_length=1)
    phases: List[TrainingPhase] = Field(min_length=1)
    safety_notes: List[str] = Field(default_factory=list)
    progression_rules: str

    @model_validator(mode="after")
    def _has_weeks(self):
        if sum(p.weeks for p in self.phases) < 1:
            raise ValueError("phases must cover at least one week")
        return self


class MacroTargets(BaseModel):
    protein_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)
    fats_g: float = Field(ge=0)


class NutritionPlanContent(BaseModel):
    macro_targets: Optional[MacroTargets] = None
    calorie_target: Optional[float] = Field(default=None, ge=0)
    timing_strategy: str
    foods_to_include: List[str] = Field(default_factory=list)
    foods_to_moderate: List[str] = Field(default_factory=list)
    hydration_target_L: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    disclaimer: str = NUTRITION_DISCLAIMER


def _validate_content(model, raw: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return model.model_validate(raw).model_dump()
    except PydanticValidationError as e:
        raise PlanSchemaError(str(e)) from e


# =============================================================================
# TRAINING
# =============================================================================

# Generic weekly sessions per category for the deterministic plan
_SESSION_TEMPLATES: Dict[GoalCategory, List[Dict[str, str]]] = {
    GoalCategory.ENDURANCE_EVENT: [
        {"type": "easy_run", "duration": "30-45min", "intensity": "Zone 2"},
        {"type": "tempo_run", "duration": "20-30min", "intensity": "Zone 3"},
        {"type": "long_run", "duration": "60-90min", "intensity": "Zone 2"},
    ],
    GoalCategory.STRENGTH: [
        {"type": "compound_lifts", "duration": "45-60min", "intensity": "RPE 7-8"},
        {"type": "accessory_work", "duration": "30-45min", "intensity": "RPE 6-7"},
        {"type": "mobility", "duration": "20min", "intensity": "Easy"},
    ],
    GoalCategory.HYBRID: [
        {"type": "full_body_strength", "duration": "45-60min", "intensity": "RPE 7"},
        {"type": "easy_cardio", "duration": "30-45min", "intensity": "Zone 2"},
        {"type": "intervals", "duration": "20-30min", "intensity": "Zone 4"},
    ],
}

_FALLBACK_PHASES = (
    # name, focus, days_per_week, note
    ("Foundation", "Base building and technique", 4, "Start conservative, build consistency"),
    ("Progressive Overload", "Gradual increase in volume and intensity", 5, "Increase by max 10% per week"),
    ("Taper / Peak", "Reduce volume, maintain intensity", 3, "Recovery and preparation"),
)


def fallback_phase_weeks(weeks_to_goal: int) -> List[int]:
    """Foundation / overload / taper weeks; the taper takes the remainder so the sum is exact."""
    foundation = int(weeks_to_goal * FALLBACK_PHASE_SPLIT[0])
    overload = int(weeks_to_goal * FALLBACK_PHASE_SPLIT[1])
    return [foundation, overload, weeks_to_goal - foundation - overload]


class TrainingPlanAssembler:
    def __init__(self, synthesizer: Optional[TextSynthesizer]):
        self.synthesizer = synthesizer

    def assemble(self, plan_input: GeneratePlanInput, category: GoalCategory, weeks_to_goal: int) -> PlanDocument:
        if self.synthesizer is None:
            return self.fallback(plan_input, category, weeks_to_goal)

        try:
            system_prompt = self._system_prompt(plan_input, category, weeks_to_goal)
            user_prompt = f"Create training plan for: {plan_input.display_name}"
            raw = self.synthesizer.complete(TrainingPlanContent.model_json_schema(), system_prompt, user_prompt)
            content = _validate_content(TrainingPlanContent, raw)
            return _document(
                plan_input, PlanType.TRAINING, content, SOURCE_GENERATED, prompt_hash(system_prompt, user_prompt)
            )
        except (SynthesisError, PlanSchemaError) as e:
            logger.warning(
                f"Training plan generation failed for goal {plan_input.goal_id}, using fallback: {e}",
                extra={"extra_fields": {"goal_id": plan_input.goal_id, "stage": "training_plan"}},
            )
            return self.fallback(plan_input, category, weeks_to_goal)
        except Exception as e:
            logger.error(
                f"Unexpected error generating training plan for goal {plan_input.goal_id}, using fallback: {e}",
                exc_info=True,
                extra={"extra_fields": {"goal_id": plan_input.goal_id, "stage": "training_plan"}},
            )
            return self.fallback(plan_input, category, weeks_to_goal)

    def fallback(self, plan_input: GeneratePlanInput, category: GoalCategory, weeks_to_goal: int) -> PlanDocument:
        sessions = _SESSION_TEMPLATES.get(category, _SESSION_TEMPLATES[GoalCategory.HYBRID])
        phases = []
        for (name, focus, days, note), weeks in zip(_FALLBACK_PHASES, fallback_phase_weeks(weeks_to_goal)):
            phases.append({
                "name": name,
                "weeks": weeks,
                "focus": focus,
                "weekly_structure": {"days_per_week": days, "sessions": sessions, "note": note},
            })

        content = TrainingPlanContent.model_validate({
            "program_name": f"{plan_input.display_name} - Progressive Training Plan",
            "phases": phases,
            "safety_notes": [
                "Monitor for signs of overtraining",
                "Respect recovery needs",
                "Listen to your body",
            ],
            "progression_rules": "Increase weekly volume by max 10%",
        }).model_dump()
        return _document(plan_input, PlanType.TRAINING, content, SOURCE_FALLBACK)

    def _system_prompt(self, plan_input: GeneratePlanInput, category: GoalCategory, weeks_to_goal: int) -> str:
        profile = plan_input.user_profile
        fitness_level = profile.fitness_level if profile and profile.fitness_level else "unknown"
        return f"""You are a training plan assistant. Create a progressive, periodized training plan following ACSM/NSCA/WHO guidelines.

GOAL: {plan_input.display_name}
TYPE: {category.value}
TIMELINE: {weeks_to_goal} weeks
CURRENT FITNESS LEVEL: {fitness_level}

PRINCIPLES:
1. Progressive overload: Gradual increase in volume/intensity
2. Periodization: Base building -> Specific training -> Peak -> Taper
3. Recovery: Include rest days and deload weeks
4. Safety: Start conservative, respect recovery needs
5. Individuality: Consider the user's current fitness level

Phase weeks should add up to {weeks_to_goal}. days_per_week is an integer from 1 to 7.
Respond with JSON containing program_name, phases, safety_notes and progression_rules."""


# =============================================================================
# NUTRITION
# =============================================================================

# g per kg bodyweight per day
PROTEIN_G_PER_KG = 1.6
FATS_G_PER_KG = 0.8
CARBS_G_PER_KG: Dict[GoalCategory, float] = {
    GoalCategory.ENDURANCE_EVENT: 5.0,
    GoalCategory.HYBRID: 4.0,
    GoalCategory.STRENGTH: 4.0,
}
DEFAULT_CARBS_G_PER_KG = 3.0
HYDRATION_L_PER_KG = 0.035
DEFAULT_HYDRATION_L = 2.5


def macro_targets_for(bodyweight_kg: float, category: GoalCategory) -> Dict[str, float]:
    carbs_per_kg = CARBS_G_PER_KG.get(category, DEFAULT_CARBS_G_PER_KG)
    return {
        "protein_g": round(bodyweight_kg * PROTEIN_G_PER_KG),
        "carbs_g": round(bodyweight_kg * carbs_per_kg),
        "fats_g": round(bodyweight_kg * FATS_G_PER_KG),
    }


def calories_from_macros(macros: Dict[str, float]) -> float:
    return macros["protein_g"] * 4 + macros["carbs_g"] * 4 + macros["fats_g"] * 9


class NutritionPlanAssembler:
    def __init__(self, synthesizer: Optional[TextSynthesizer]):
        self.synthesizer = synthesizer

    def assemble(self, plan_input: GeneratePlanInput, category: GoalCategory, weeks_to_goal: int) -> PlanDocument:
        if self.synthesizer is None:
            return self.fallback(plan_input, category)

        try:
            system_prompt = self._system_prompt(plan_input, category, weeks_to_goal)
            user_prompt = f"Create nutrition plan for: {plan_input.display_name}"
            raw = self.synthesizer.complete(NutritionPlanContent.model_json_schema(), system_prompt, user_prompt)
            content = _validate_content(NutritionPlanContent, raw)
            content["disclaimer"] = NUTRITION_DISCLAIMER
            return _document(
                plan_input, PlanType.NUTRITION, content, SOURCE_GENERATED, prompt_hash(system_prompt, user_prompt)
            )
        except (SynthesisError, PlanSchemaError) as e:
            logger.warning(
                f"Nutrition plan generation failed for goal {plan_input.goal_id}, using fallback: {e}",
                extra={"extra_fields": {"goal_id": plan_input.goal_id, "stage": "nutrition_plan"}},
            )
            return self.fallback(plan_input, category)
        except Exception as e:
            logger.error(
                f"Unexpected error generating nutrition plan for goal {plan_input.goal_id}, using fallback: {e}",
                exc_info=True,
                extra={"extra_fields": {"goal_id": plan_input.goal_id, "stage": "nutrition_plan"}},
            )
            return self.fallback(plan_input, category)

    def fallback(self, plan_input: GeneratePlanInput, category: GoalCategory) -> PlanDocument:
        bodyweight = plan_input.user_profile.bodyweight_kg if plan_input.user_profile else None

        macros = None
        calories = None
        hydration = DEFAULT_HYDRATION_L
        if bodyweight:
            macros = macro_targets_for(bodyweight, category)
            calories = calories_from_macros(macros)
            hydration = round(bodyweight * HYDRATION_L_PER_KG, 1)

        content = NutritionPlanContent.model_validate({
            "macro_targets": macros,
            "calorie_target": calories,
            "timing_strategy": "Eat balanced meals throughout the day",
            "foods_to_include": ["whole foods", "lean protein", "vegetables", "fruits", "whole grains"],
            "foods_to_moderate": ["processed foods", "added sugars", "excessive sodium"],
            "hydration_target_L": hydration,
            "notes": "General nutrition guidance - customize based on your needs",
        }).model_dump()
        return _document(plan_input, PlanType.NUTRITION, content, SOURCE_FALLBACK)

    def _system_prompt(self, plan_input: GeneratePlanInput, category: GoalCategory, weeks_to_goal: int) -> str:
        profile = plan_input.user_profile
        bodyweight = f"{profile.bodyweight_kg} kg" if profile and profile.bodyweight_kg else "unknown"
        conditions = ", ".join(profile.medical_conditions) if profile and profile.medical_conditions else "none reported"
        return f"""You are a nutrition assistant. Create evidence-based nutrition guidance.

GOAL: {plan_input.display_name}
TYPE: {category.value}
TIMELINE: {weeks_to_goal} weeks
BODYWEIGHT: {bodyweight}
MEDICAL CONDITIONS: {conditions}

TASK:
1. Provide macro targets (protein_g, carbs_g, fats_g) per day
2. Suggest nutrient timing strategies
3. Recommend foods to include/moderate
4. Note any special considerations

DISCLAIMER: {NUTRITION_DISCLAIMER}

Respond with JSON containing macro_targets, calorie_target, timing_strategy,
foods_to_include, foods_to_moderate, hydration_target_L and notes."""


# =============================================================================
# SUPPLEMENTS
# =============================================================================

class SupplementPlanAssembler:
    """Static stub: disclaimer and an empty recommendation list."""

    def assemble(self, plan_input: GeneratePlanInput, category: GoalCategory, weeks_to_goal: int) -> PlanDocument:
        content = {"disclaimer": SUPPLEMENT_DISCLAIMER, "recommendations": []}
        return _document(plan_input, PlanType.SUPPLEMENTS, content, SOURCE_STATIC)
