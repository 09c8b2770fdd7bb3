"""
AI-Powered Standards Discovery

Finds an evidence-based standard for a metric the catalog doesn't cover yet.

Process:
1. Short-circuit if the catalog already has any row for the metric
2. Ask the synthesizer for candidate standards (strict JSON shape)
3. Validate the claimed source through the evidence tier validator
4. Store only reputable candidates, unverified, with downgraded confidence

Nothing raises past this boundary: every failure is logged and treated as
"not found". Discovery only benefits future requests; it runs detached from
plan generation (see tasks/standards_tasks.py).
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from models import MetricStandard
from .evidence import validate_source
from .synthesizer import SynthesisError, TextSynthesizer

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a fitness and health standards researcher. Your job is to find evidence-based standards for health and fitness metrics from reputable sources.

Focus on these source types:
1. Peer-reviewed research (PubMed, scientific journals)
2. Professional organizations (ACSM, NSCA, WHO, AHA, CDC)
3. Established textbooks and guidelines
4. Expert consensus statements

For each metric, provide standard values (ranges, percentiles, or absolute values),
age and gender stratification if applicable, the source citation, and
classification levels (e.g. poor, fair, good, excellent).

If you cannot find a credible standard, set "found" to false."""

DISCOVERY_SCHEMA = {
    "found": "boolean",
    "metricKey": "string",
    "standardType": "percentile | bodyweight_ratio | absolute_value | pace_per_km",
    "category": "cardio | strength | body_comp | running | clinical",
    "standards": [
        {
            "ageMin": "number | null",
            "ageMax": "number | null",
            "gender": "male | female | all",
            "valueMin": "number | null",
            "valueMax": "number | null",
            "valueSingle": "number | null",
            "unit": "string",
            "percentile": "number | null",
            "level": "string",
        }
    ],
    "sourceName": "string",
    "sourceUrl": "string",
    "sourceDescription": "string",
    "evidenceLevel": "peer_reviewed | professional_org",
    "confidenceScore": "number (0-1)",
}


class _CandidateStandard(BaseModel):
    ageMin: Optional[int] = None
    ageMax: Optional[int] = None
    gender: str = "all"
    valueMin: Optional[float] = None
    valueMax: Optional[float] = None
    valueSingle: Optional[float] = None
    unit: str
    percentile: Optional[int] = None
    level: Optional[str] = None


class _DiscoveryResponse(BaseModel):
    found: bool
    metricKey: Optional[str] = None
    standardType: str = "absolute_value"
    category: str = "clinical"
    standards: List[_CandidateStandard] = Field(default_factory=list)
    sourceName: str = ""
    sourceUrl: Optional[str] = None
    sourceDescription: str = ""
    evidenceLevel: Optional[str] = None
    confidenceScore: float = Field(default=0.0, ge=0.0, le=1.0)


@dataclass
class DiscoveredStandard:
    """Pre-persistence standard; exists only until stored or discarded."""
    metric_key: str
    standard_type: str
    category: str
    gender: str
    unit: str
    source_name: str
    source_description: str
    confidence_score: float
    evidence_level: str
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    value_min: Optional[float] = None
    value_max: Optional[float] = None
    value_single: Optional[float] = None
    percentile: Optional[int] = None
    level: Optional[str] = None
    source_url: Optional[str] = None


class StandardsDiscovery:
    def __init__(self, db: Session, synthesizer: Optional[TextSynthesizer]):
        self.db = db
        self.synthesizer = synthesizer

    def _standard_exists(self, metric_key: str) -> bool:
        return (
            self.db.query(MetricStandard.id)
            .filter(MetricStandard.metric_key == metric_key)
            .first()
            is not None
        )

    def discover_standard(self, metric_key: str, context: str) -> Optional[DiscoveredStandard]:
        """
        Discover a standard for a metric.

        Args:
            metric_key: Metric to find standards for (e.g. 'lactate_threshold')
            context: Goal context that helps the search

        Returns:
            DiscoveredStandard, or None if one exists already, none was found,
            the source isn't reputable, or anything failed.
        """
        logger.info(f"Discovering standard for metric: {metric_key}")

        try:
            if self._standard_exists(metric_key):
                logger.info(f"Standard already exists for {metric_key}")
                return None

            if self.synthesizer is None:
                logger.info(f"No synthesizer configured; skipping discovery for {metric_key}")
                return None

            user_prompt = (
                f'Find evidence-based standards for the metric "{metric_key}".\n\n'
                f"Context from user's goal: {context}\n\n"
                "Search for standards from reputable sources like ACSM, NSCA, WHO, AHA, "
                "PubMed peer-reviewed research, and clinical practice guidelines.\n\n"
                "Provide the most authoritative and recent standard you can find."
            )
            raw = self.synthesizer.complete(DISCOVERY_SCHEMA, SYSTEM_PROMPT, user_prompt)
            result = _DiscoveryResponse.model_validate(raw)

            if not result.found or not result.standards:
                logger.info(f"No standard found for {metric_key}")
                return None

            validation = validate_source(result.sourceName, result.evidenceLevel)
            if not validation.is_reputable:
                logger.warning(
                    f"Source not reputable for {metric_key}: {validation.reason}",
                    extra={"extra_fields": {"metric_key": metric_key, "source_name": result.sourceName}},
                )
                return None

            top = result.standards[0]
            discovered = DiscoveredStandard(
                # Keyed by what we asked for, not what the model echoed back
                metric_key=metric_key,
                standard_type=result.standardType,
                category=result.category,
                age_min=top.ageMin,
                age_max=top.ageMax,
                gender=top.gender if top.gender in ("male", "female", "all") else "all",
                value_min=top.valueMin,
                value_max=top.valueMax,
                value_single=top.valueSingle,
                unit=top.unit,
                percentile=top.percentile,
                level=top.level,
                source_name=result.sourceName,
                source_url=result.sourceUrl,
                source_description=result.sourceDescription,
                confidence_score=min(result.confidenceScore, validation.confidence_score),
                evidence_level=validation.evidence_level.value,
            )
            logger.info(f"Discovered standard for {metric_key} from {discovered.source_name}")
            return discovered

        except (SynthesisError, PydanticValidationError) as e:
            logger.warning(f"Standard discovery response unusable for {metric_key}: {e}")
            return None
        except Exception as e:
            logger.error(f"Error discovering standard for {metric_key}: {e}", exc_info=True)
            return None

    def store_standard(self, standard: DiscoveredStandard) -> str:
        """Persist a discovered standard; it stays unverified until an admin reviews it."""
        row = MetricStandard(
            **asdict(standard),
            is_active=True,
            verified_by_admin=False,
            usage_count=0,
            last_verified_at=datetime.now(timezone.utc),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)

        logger.info(f"Stored standard for {standard.metric_key} with ID: {row.id}")
        return str(row.id)

    def discover_and_store(self, metric_key: str, context: str) -> Optional[str]:
        discovered = self.discover_standard(metric_key, context)
        if not discovered:
            return None

        try:
            return self.store_standard(discovered)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to store discovered standard for {metric_key}: {e}", exc_info=True)
            return None
