"""
Tests for the goal plans API router.

Runs the FastAPI app against the in-memory SQLite session with no LLM
configured, so every generative stage uses its deterministic fallback.
"""
from datetime import date
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from core.database import get_db
from main import app
from models import GoalMilestone, GoalPlan, MetricStandard
from routers.goal_plans import get_goal_plan_generator
from services.goal_plans import GoalPlanGenerator, StandardsManager


@pytest.fixture
def dispatcher():
    return MagicMock(return_value=True)


@pytest.fixture
def client(db_session, dispatcher, today):
    def _get_db():
        yield db_session

    def _get_generator():
        return GoalPlanGenerator(StandardsManager(db_session), None, dispatch_discovery=dispatcher, today=today)

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_goal_plan_generator] = _get_generator
    yield TestClient(app)
    app.dependency_overrides.clear()


def _request(**overrides):
    body = {
        "goal_id": "goal-42",
        "user_id": "user-7",
        "goal_category": "strength",
        "display_name": "Get stronger",
        "target_date": "2025-03-31",
        "metrics": [
            {"metric_key": "squat_1rm", "label": "1RM Squat", "unit": "kg", "current_value": 100},
        ],
        "user_profile": {"age": 25, "gender": "male", "bodyweight_kg": 80},
    }
    body.update(overrides)
    return body


class TestGenerateEndpoint:
    def test_generates_complete_plan(self, client):
        response = client.post("/v1/goal-plans/generate", json=_request())

        assert response.status_code == 200
        data = response.json()
        assert data["goal_id"] == "goal-42"
        assert data["weeks_to_goal"] == 12
        assert data["profile_status"] == "complete"
        assert 3 <= len(data["milestones"]) <= 6
        assert data["training_plan"]["plan_type"] == "training"
        assert data["nutrition_plan"]["plan_type"] == "nutrition"
        assert data["supplement_plan"]["plan_type"] == "supplements"
        assert data["safety_warnings"][-1].startswith("Use proper form")
        assert data["feasibility_assessment"]["is_feasible"] is True
        assert "persisted" not in data

        squat = data["metrics"][0]
        assert squat["target_value"] == pytest.approx(160.0)
        assert squat["target_source"]

    def test_unknown_category_is_422(self, client):
        response = client.post("/v1/goal-plans/generate", json=_request(goal_category="marathon"))

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR_GOAL_CATEGORY"
        assert "marathon" in body["detail"]

    def test_missing_required_field_is_422(self, client):
        body = _request()
        del body["display_name"]
        assert client.post("/v1/goal-plans/generate", json=body).status_code == 422

    def test_missing_gender_reports_insufficient_profile(self, client, dispatcher):
        response = client.post(
            "/v1/goal-plans/generate",
            json=_request(user_profile={"age": 25, "bodyweight_kg": 80}),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["profile_status"] == "insufficient_profile"
        assert data["metrics"][0]["target_value"] is None
        dispatcher.assert_not_called()

    def test_persist_stores_rows(self, client, db_session):
        response = client.post("/v1/goal-plans/generate?persist=true", json=_request())

        assert response.status_code == 200
        persisted = response.json()["persisted"]
        assert len(persisted["plan_ids"]) == 3
        assert db_session.query(GoalPlan).filter_by(goal_id="goal-42").count() == 3
        assert db_session.query(GoalMilestone).filter_by(goal_id="goal-42").count() == len(persisted["milestone_ids"])


class TestValidateSourceEndpoint:
    def test_tier_one_source(self, client):
        response = client.post(
            "/v1/goal-plans/standards/validate-source",
            json={"source_name": "ACSM Guidelines for Exercise Testing", "claimed_evidence_level": "peer_reviewed"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_reputable"] is True
        assert data["evidence_level"] == "peer_reviewed"
        assert data["confidence_score"] == 1.0

    def test_unknown_source(self, client):
        response = client.post(
            "/v1/goal-plans/standards/validate-source",
            json={"source_name": "Some fitness blog"},
        )

        data = response.json()
        assert data["is_reputable"] is False
        assert data["evidence_level"] == "ai_discovered"
        assert data["confidence_score"] == 0.5


class TestPendingReviewEndpoint:
    def _standard(self, metric_key, verified):
        return MetricStandard(
            metric_key=metric_key,
            standard_type="absolute_value",
            category="cardio",
            gender="all",
            value_single=50.0,
            unit="ml/kg/min",
            level="intermediate",
            source_name="NSCA Essentials",
            confidence_score=1.0,
            evidence_level="professional_org",
            verified_by_admin=verified,
        )

    def test_lists_only_unverified(self, client, db_session):
        db_session.add_all([
            self._standard("lactate_threshold", verified=False),
            self._standard("vo2max", verified=True),
        ])
        db_session.commit()

        response = client.get("/v1/goal-plans/standards/pending-review")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["standards"][0]["metric_key"] == "lactate_threshold"

    def test_limit_bounds(self, client):
        assert client.get("/v1/goal-plans/standards/pending-review?limit=0").status_code == 422


class TestHealth:
    def test_ping(self, client):
        assert client.get("/ping").json() == {"pong": True}


class TestDefaultMetricsEndpoint:
    def test_strength_defaults(self, client):
        response = client.get("/v1/goal-plans/default-metrics/strength")

        assert response.status_code == 200
        data = response.json()
        assert data["goal_category"] == "strength"
        keys = [m["metric_key"] for m in data["metrics"]]
        assert keys[:3] == ["squat_1rm", "deadlift_1rm", "bench_press_1rm"]
        assert all(m["target_status"] == "unenriched" for m in data["metrics"])

    def test_unknown_category_is_422(self, client):
        response = client.get("/v1/goal-plans/default-metrics/marathon")

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_GOAL_CATEGORY"
