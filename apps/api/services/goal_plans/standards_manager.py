"""
Standards Manager

Resolves a metric to a calibrated target from the metric_standard catalog.

Lookup:
1. Match metric_key, active rows, gender (or 'all'), and age range
2. Pick the row for the desired level (or the type's default level)
3. Turn it into a number: range midpoint, single value, or
   bodyweight x ratio for strength standards

Usage:
    manager = StandardsManager(db)
    manager.initialize()
    result = manager.calculate_target(
        "vo2max", 41.0, "Get fit for a half marathon",
        UserProfile(age=34, gender="female"),
        manager.infer_desired_level("Get fit for a half marathon"),
    )
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Session

from models import MetricStandard
from .metrics import UserProfile
from .standards_seed import all_seed_standards

logger = logging.getLogger(__name__)

DEFAULT_PERCENTILE = 60
DEFAULT_RATIO_LEVEL = "intermediate"
PREFERRED_ABSOLUTE_LEVELS = ("normal", "fitness", "average", "good", "intermediate")

# Keyword -> level, checked in order (most ambitious first)
LEVEL_KEYWORDS = (
    (("elite", "competitive", "advanced"), "advanced"),
    (("intermediate", "solid", "strong"), "intermediate"),
    (("beginner", "novice", "start"), "novice"),
    (("healthy", "fit", "good shape"), "fitness"),
)


@dataclass
class StandardResult:
    standard: MetricStandard
    target_value: float
    confidence: float
    source: str
    description: str


class StandardsResolver(Protocol):
    def initialize(self) -> None:
        ...

    def calculate_target(
        self,
        metric_key: str,
        current_value: Optional[float],
        goal_description: str,
        user_profile: UserProfile,
        desired_level: Optional[str] = None,
    ) -> Optional[StandardResult]:
        ...

    def infer_desired_level(self, goal_description: str) -> Optional[str]:
        ...

    def track_standard_usage(self, standard_id) -> None:
        ...


class StandardsManager:
    """SQLAlchemy-backed standards resolver."""

    def __init__(self, db: Session):
        self.db = db
        self._initialized = False

    def initialize(self) -> None:
        """Seed the catalog from the local libraries if it is empty."""
        if self._initialized:
            return

        if self.db.query(MetricStandard.id).first() is None:
            rows = all_seed_standards()
            logger.info(f"Seeding {len(rows)} metric standards from local libraries")
            now = datetime.now(timezone.utc)
            self.db.add_all(
                MetricStandard(
                    **row,
                    is_active=True,
                    verified_by_admin=True,
                    usage_count=0,
                    last_verified_at=now,
                )
                for row in rows
            )
            self.db.commit()

        self._initialized = True

    def has_standard(self, metric_key: str) -> bool:
        return (
            self.db.query(MetricStandard.id)
            .filter(MetricStandard.metric_key == metric_key)
            .first()
            is not None
        )

    def get_standards(self, metric_key: str, user_profile: UserProfile) -> List[MetricStandard]:
        """All active standards applicable to this user, highest confidence first."""
        age = user_profile.age
        return (
            self.db.query(MetricStandard)
            .filter(
                MetricStandard.metric_key == metric_key,
                MetricStandard.is_active.is_(True),
                or_(MetricStandard.gender == user_profile.gender, MetricStandard.gender == "all"),
                and_(
                    or_(MetricStandard.age_min.is_(None), MetricStandard.age_min <= age),
                    or_(MetricStandard.age_max.is_(None), MetricStandard.age_max >= age),
                ),
            )
            .order_by(MetricStandard.confidence_score.desc())
            .all()
        )

    def calculate_target(
        self,
        metric_key: str,
        current_value: Optional[float],
        goal_description: str,
        user_profile: UserProfile,
        desired_level: Optional[str] = None,
    ) -> Optional[StandardResult]:
        """
        Calculate a target value for a metric from the catalog.

        Returns None when no applicable standard exists, or when the standard
        needs a profile field the user doesn't have (bodyweight for ratios).
        """
        self.initialize()

        standards = self.get_standards(metric_key, user_profile)
        if not standards:
            return None

        standard_type = standards[0].standard_type
        by_level = {s.level: s for s in standards if s.level}

        if standard_type == "percentile":
            chosen = by_level.get(desired_level) if desired_level else None
            if chosen is None:
                chosen = next((s for s in standards if s.percentile == DEFAULT_PERCENTILE), None)
            if chosen is None:
                return None
            return self._result(chosen, _representative_value(chosen), chosen.source_description or "")

        if standard_type == "bodyweight_ratio":
            if not user_profile.bodyweight_kg:
                return None
            chosen = by_level.get(desired_level) if desired_level else None
            if chosen is None:
                chosen = by_level.get(DEFAULT_RATIO_LEVEL)
            if chosen is None or not chosen.value_single:
                return None
            target = round(user_profile.bodyweight_kg * chosen.value_single)
            return self._result(chosen, target, f"{chosen.level} level: {chosen.value_single}x bodyweight")

        if standard_type == "absolute_value":
            chosen = by_level.get(desired_level) if desired_level else None
            if chosen is None:
                chosen = next(
                    (by_level[level] for level in PREFERRED_ABSOLUTE_LEVELS if level in by_level),
                    standards[0],
                )
            value = _representative_value(chosen)
            if value is None:
                return None
            return self._result(chosen, value, chosen.source_description or "")

        logger.debug(f"Unsupported standard_type '{standard_type}' for {metric_key}")
        return None

    def infer_desired_level(self, goal_description: str) -> Optional[str]:
        """Keyword match on the goal text; None lets calculate_target use its defaults."""
        lower = (goal_description or "").lower()
        for keywords, level in LEVEL_KEYWORDS:
            if any(k in lower for k in keywords):
                return level
        return None

    def track_standard_usage(self, standard_id) -> None:
        """Increment usage_count (feeds popularity-weighted lookups)."""
        try:
            self.db.execute(
                update(MetricStandard)
                .where(MetricStandard.id == standard_id)
                .values(usage_count=MetricStandard.usage_count + 1)
            )
            self.db.commit()
        except Exception:
            # Leave the session usable for the remaining lookups
            self.db.rollback()
            raise

    @staticmethod
    def _result(standard: MetricStandard, target: float, description: str) -> StandardResult:
        return StandardResult(
            standard=standard,
            target_value=target,
            confidence=standard.confidence_score,
            source=standard.source_name,
            description=description,
        )


def _representative_value(standard: MetricStandard) -> Optional[float]:
    """Single value if present, else the range midpoint (open-ended ranges use the floor)."""
    if standard.value_single is not None:
        return standard.value_single
    if standard.value_min is None:
        return standard.value_max
    if standard.value_max is None or standard.value_max >= 999:
        return standard.value_min
    return round((standard.value_min + standard.value_max) / 2, 2)
