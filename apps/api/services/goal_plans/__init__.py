# Goal Plan Generation Engine
#
# Turns a stated goal, its tracked metrics and a timeline into milestones,
# training / nutrition / supplement plans and safety guidance.
#
# Architecture:
# - Standards catalog (seeded + AI-discovered) resolves evidence-graded targets
# - Discovery runs detached on Celery and only benefits later requests
# - Every generative stage has a deterministic, schema-valid fallback

from .constants import Direction, EvidenceLevel, GoalCategory, PlanType, RiskLevel, parse_goal_category
from .metrics import GeneratePlanInput, GoalMetric, TargetStatus, UserProfile, default_metrics_for
from .evidence import SourceValidation, validate_source
from .progression import ProgressionCheckpoint, build_progression
from .standards_manager import StandardResult, StandardsManager, StandardsResolver
from .standards_discovery import DiscoveredStandard, StandardsDiscovery
from .enrichment import EnrichmentReport, enrich_metrics
from .milestones import CompletionRule, MilestoneDraft, MilestoneGenerator
from .plan_assemblers import (
    NutritionPlanAssembler,
    PlanDocument,
    PlanSchemaError,
    SupplementPlanAssembler,
    TrainingPlanAssembler,
)
from .feasibility import FeasibilityAssessment, assess_feasibility
from .safety import compose_safety_warnings, default_safety_warnings
from .synthesizer import SynthesisError, TextSynthesizer, get_text_synthesizer
from .generator import (
    GeneratedPlan,
    GoalPlanGenerator,
    InvalidGoalCategoryError,
    persist_generated_plan,
)

__all__ = [
    # Types
    'GoalCategory',
    'Direction',
    'EvidenceLevel',
    'PlanType',
    'RiskLevel',
    'GeneratePlanInput',
    'GoalMetric',
    'TargetStatus',
    'UserProfile',
    'default_metrics_for',
    'parse_goal_category',

    # Standards
    'SourceValidation',
    'validate_source',
    'StandardResult',
    'StandardsManager',
    'StandardsResolver',
    'DiscoveredStandard',
    'StandardsDiscovery',

    # Pipeline stages
    'EnrichmentReport',
    'enrich_metrics',
    'ProgressionCheckpoint',
    'build_progression',
    'CompletionRule',
    'MilestoneDraft',
    'MilestoneGenerator',
    'PlanDocument',
    'PlanSchemaError',
    'TrainingPlanAssembler',
    'NutritionPlanAssembler',
    'SupplementPlanAssembler',
    'FeasibilityAssessment',
    'assess_feasibility',
    'compose_safety_warnings',
    'default_safety_warnings',

    # Synthesis
    'SynthesisError',
    'TextSynthesizer',
    'get_text_synthesizer',

    # Orchestrator
    'GeneratedPlan',
    'GoalPlanGenerator',
    'InvalidGoalCategoryError',
    'persist_generated_plan',
]
