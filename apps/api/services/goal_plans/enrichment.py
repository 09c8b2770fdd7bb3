"""
Metric Enrichment Stage

Gives every metric of a goal a target before milestones and plans are built.

Per metric:
    standard resolves      -> RESOLVED, usage tracked
    no standard, has value -> discovery enqueued, ESTIMATED (+/-10%, conf 0.5)
    no standard, no value  -> discovery enqueued, PENDING_DISCOVERY

A failure on one metric never aborts the others. Gender is required; without
it enrichment is skipped and the report says the profile is insufficient.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .constants import (
    ESTIMATED_DECREASE_FACTOR,
    ESTIMATED_INCREASE_FACTOR,
    ESTIMATED_TARGET_CONFIDENCE,
    Direction,
)
from .metrics import GeneratePlanInput, GoalMetric
from .standards_manager import StandardsResolver

logger = logging.getLogger(__name__)

PROFILE_COMPLETE = "complete"
PROFILE_INSUFFICIENT = "insufficient_profile"

# (metric_key, context) -> None; must not block
DiscoveryDispatcher = Callable[[str, str], object]


@dataclass
class EnrichmentReport:
    profile_status: str = PROFILE_COMPLETE
    resolved: List[str] = field(default_factory=list)
    estimated: List[str] = field(default_factory=list)
    pending_discovery: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    discovery_requested: List[str] = field(default_factory=list)


def estimate_target(current_value: float, direction: Direction) -> float:
    """10% toward the desired direction; maintain/achieve count as increase."""
    if direction == Direction.DECREASE:
        return current_value * ESTIMATED_DECREASE_FACTOR
    return current_value * ESTIMATED_INCREASE_FACTOR


def enrich_metrics(
    plan_input: GeneratePlanInput,
    resolver: StandardsResolver,
    dispatch_discovery: Optional[DiscoveryDispatcher] = None,
) -> EnrichmentReport:
    """
    Enrich plan_input.metrics in place and report what happened to each.
    """
    report = EnrichmentReport()
    if not plan_input.metrics:
        return report

    profile = plan_input.user_profile
    if profile is None or not profile.is_complete:
        logger.warning(
            f"Skipping metric enrichment for goal {plan_input.goal_id}: gender not provided",
            extra={"extra_fields": {"goal_id": plan_input.goal_id, "user_id": plan_input.user_id}},
        )
        report.profile_status = PROFILE_INSUFFICIENT
        return report

    resolver.initialize()
    desired_level = resolver.infer_desired_level(plan_input.display_name)

    for metric in plan_input.metrics:
        try:
            _enrich_one(plan_input, metric, resolver, desired_level, dispatch_discovery, report)
        except Exception as e:
            logger.error(f"Error enriching metric {metric.metric_key}: {e}", exc_info=True)
            report.failed.append(metric.metric_key)

    logger.info(
        f"Enriched {len(plan_input.metrics)} metrics for goal {plan_input.goal_id}",
        extra={"extra_fields": {
            "goal_id": plan_input.goal_id,
            "resolved": len(report.resolved),
            "estimated": len(report.estimated),
            "pending_discovery": len(report.pending_discovery),
            "failed": len(report.failed),
        }},
    )
    return report


def _enrich_one(
    plan_input: GeneratePlanInput,
    metric: GoalMetric,
    resolver: StandardsResolver,
    desired_level: Optional[str],
    dispatch_discovery: Optional[DiscoveryDispatcher],
    report: EnrichmentReport,
) -> None:
    current_value = metric.starting_value

    result = resolver.calculate_target(
        metric.metric_key,
        current_value,
        plan_input.display_name,
        plan_input.user_profile,
        desired_level,
    )

    if result is not None:
        metric.resolve(
            target_value=result.target_value,
            confidence=result.confidence,
            source_id=str(result.standard.id),
            description=f"{result.source}: {result.description}" if result.description else result.source,
        )
        report.resolved.append(metric.metric_key)
        logger.debug(f"Calculated target for {metric.metric_key}: {result.target_value} (from {result.source})")
        try:
            resolver.track_standard_usage(result.standard.id)
        except Exception as e:
            logger.warning(f"Could not track usage of standard {result.standard.id}: {e}")
        return

    logger.info(f"No standard found for {metric.metric_key}, requesting discovery")
    if dispatch_discovery is not None:
        try:
            dispatch_discovery(metric.metric_key, f"{plan_input.display_name} - {metric.label}")
            report.discovery_requested.append(metric.metric_key)
        except Exception as e:
            logger.warning(f"Discovery dispatch failed for {metric.metric_key}: {e}")

    if current_value:
        metric.estimate(
            target_value=estimate_target(current_value, metric.direction),
            confidence=ESTIMATED_TARGET_CONFIDENCE,
            description="Estimated based on 10% improvement",
        )
        report.estimated.append(metric.metric_key)
    else:
        metric.mark_pending_discovery()
        report.pending_discovery.append(metric.metric_key)
