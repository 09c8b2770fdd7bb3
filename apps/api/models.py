from sqlalchemy import Column, Integer, Boolean, CheckConstraint, Float, Date, DateTime, Text, Index, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from core.database import Base
import uuid

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


class MetricStandard(Base):
    """
    Sourced reference value or range for a metric, stratified by age/gender.

    Seeded from local standards libraries and extended by AI discovery.
    Discovered rows start unverified and need an admin review.
    """
    __tablename__ = "metric_standard"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    metric_key = Column(Text, nullable=False, index=True)
    # 'percentile' | 'bodyweight_ratio' | 'absolute_value' | 'pace_per_km'
    standard_type = Column(Text, nullable=False)
    # 'cardio' | 'strength' | 'body_comp' | 'running' | 'clinical'
    category = Column(Text, nullable=False)

    age_min = Column(Integer, nullable=True)
    age_max = Column(Integer, nullable=True)
    gender = Column(Text, nullable=False, default="all")  # 'male' | 'female' | 'all'

    value_min = Column(Float, nullable=True)
    value_max = Column(Float, nullable=True)
    value_single = Column(Float, nullable=True)
    unit = Column(Text, nullable=False)
    percentile = Column(Integer, nullable=True)
    level = Column(Text, nullable=True)

    # --- PROVENANCE ---
    source_name = Column(Text, nullable=False)
    source_url = Column(Text, nullable=True)
    source_description = Column(Text, nullable=True)
    confidence_score = Column(Float, nullable=False, default=1.0)
    # 'peer_reviewed' | 'professional_org' | 'ai_discovered' | 'community'
    evidence_level = Column(Text, nullable=False)

    is_active = Column(Boolean, nullable=False, default=True)
    verified_by_admin = Column(Boolean, nullable=False, default=False)
    usage_count = Column(Integer, nullable=False, default=0)
    last_verified_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("confidence_score >= 0 AND confidence_score <= 1", name="ck_metric_standard_confidence"),
        Index("ix_metric_standard_lookup", "metric_key", "gender", "is_active"),
    )


class GoalMilestone(Base):
    __tablename__ = "goal_milestone"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=False)
    # {"type": "metric_threshold", "metric_key": ..., "operator": ..., "value": ...}
    completion_rule = Column(JSONType, nullable=True)
    status = Column(Text, nullable=False, default="pending")
    progress_pct = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class GoalPlan(Base):
    __tablename__ = "goal_plan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(Text, nullable=False, index=True)
    plan_type = Column(Text, nullable=False)  # 'training' | 'nutrition' | 'supplements'
    period = Column(Text, nullable=False, default="weekly")
    content_json = Column(JSONType, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    source_prompt_hash = Column(Text, nullable=True)
    is_active = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_goal_plan_goal_type", "goal_id", "plan_type"),
    )
