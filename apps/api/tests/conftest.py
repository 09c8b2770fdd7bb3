"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database created from the models,
so nothing needs Postgres, Redis or an LLM key.
"""
import os
import sys
from datetime import date

import pytest

# Must be set before core.config / core.database are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("ANTHROPIC_API_KEY", "")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.database import Base  # noqa: E402
import models  # noqa: E402,F401
from services.goal_plans.metrics import GeneratePlanInput, GoalMetric, UserProfile  # noqa: E402

TODAY = date(2025, 1, 6)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Fresh database per test; dropped afterwards."""
    Session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def female_profile():
    return UserProfile(age=34, gender="female", bodyweight_kg=60.0)


@pytest.fixture
def male_profile():
    return UserProfile(age=25, gender="male", bodyweight_kg=80.0)


@pytest.fixture
def make_plan_input():
    """Factory for GeneratePlanInput with sensible defaults."""

    def _make(**overrides) -> GeneratePlanInput:
        defaults = dict(
            goal_id="goal-1",
            user_id="user-1",
            goal_category="strength",
            display_name="Get stronger",
            target_date=None,
            goal_entities={},
            metrics=[],
            user_profile=UserProfile(age=25, gender="male", bodyweight_kg=80.0),
        )
        defaults.update(overrides)
        return GeneratePlanInput(**defaults)

    return _make


@pytest.fixture
def squat_metric():
    return GoalMetric(metric_key="squat_1rm", label="1RM Squat", unit="kg", current_value=100.0)
