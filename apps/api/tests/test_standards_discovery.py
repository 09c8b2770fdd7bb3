"""
Tests for AI-powered standards discovery.

The synthesizer is scripted; the catalog is a real (SQLite) session.
"""
from unittest.mock import MagicMock

import pytest

from models import MetricStandard
from services.goal_plans.standards_discovery import StandardsDiscovery
from services.goal_plans.synthesizer import SynthesisError
from tests.goal_plan_helpers import FakeSynthesizer


def _response(**overrides):
    body = {
        "found": True,
        "metricKey": "lactate_threshold_hr",
        "standardType": "absolute_value",
        "category": "running",
        "standards": [
            {
                "ageMin": 20,
                "ageMax": 39,
                "gender": "all",
                "valueMin": 160,
                "valueMax": 175,
                "valueSingle": None,
                "unit": "bpm",
                "percentile": None,
                "level": "trained",
            }
        ],
        "sourceName": "ACSM Guidelines",
        "sourceUrl": "https://www.acsm.org",
        "sourceDescription": "Lactate threshold heart rate ranges",
        "evidenceLevel": "professional_org",
        "confidenceScore": 0.9,
    }
    body.update(overrides)
    return body


class TestDiscoverStandard:
    def test_reputable_source_is_returned(self, db_session):
        discovery = StandardsDiscovery(db_session, FakeSynthesizer([_response()]))

        result = discovery.discover_standard("lactate_threshold_hr", "Run a faster 10k")

        assert result is not None
        assert result.metric_key == "lactate_threshold_hr"
        assert result.value_min == 160
        assert result.value_max == 175
        assert result.evidence_level == "professional_org"

    def test_confidence_is_min_of_claimed_and_validator(self, db_session):
        tier_two = _response(sourceName="ExRx", confidenceScore=0.95)
        result = StandardsDiscovery(db_session, FakeSynthesizer([tier_two])).discover_standard("x", "")
        assert result.confidence_score == 0.85

        low_claim = _response(confidenceScore=0.7)
        result = StandardsDiscovery(db_session, FakeSynthesizer([low_claim])).discover_standard("x", "")
        assert result.confidence_score == 0.7

    def test_uses_requested_metric_key(self, db_session):
        result = StandardsDiscovery(
            db_session, FakeSynthesizer([_response(metricKey="something_else")])
        ).discover_standard("lactate_threshold_hr", "")
        assert result.metric_key == "lactate_threshold_hr"

    def test_unreputable_source_is_rejected(self, db_session):
        synth = FakeSynthesizer([_response(sourceName="Bro Science Forum")])
        assert StandardsDiscovery(db_session, synth).discover_standard("x", "") is None

    def test_not_found(self, db_session):
        synth = FakeSynthesizer([{"found": False}])
        assert StandardsDiscovery(db_session, synth).discover_standard("x", "") is None

    def test_empty_standards_list(self, db_session):
        synth = FakeSynthesizer([_response(standards=[])])
        assert StandardsDiscovery(db_session, synth).discover_standard("x", "") is None

    def test_malformed_response_returns_none(self, db_session):
        synth = FakeSynthesizer([{"found": True, "standards": [{"gender": "all"}]}])
        assert StandardsDiscovery(db_session, synth).discover_standard("x", "") is None

    def test_synthesis_error_returns_none(self, db_session):
        synth = FakeSynthesizer([SynthesisError("timeout")])
        assert StandardsDiscovery(db_session, synth).discover_standard("x", "") is None

    def test_unexpected_error_returns_none(self, db_session):
        synth = MagicMock()
        synth.complete.side_effect = RuntimeError("boom")
        assert StandardsDiscovery(db_session, synth).discover_standard("x", "") is None

    def test_no_synthesizer(self, db_session):
        assert StandardsDiscovery(db_session, None).discover_standard("x", "") is None

    def test_unknown_gender_is_normalized(self, db_session):
        body = _response()
        body["standards"][0]["gender"] = "M"
        result = StandardsDiscovery(db_session, FakeSynthesizer([body])).discover_standard("x", "")
        assert result.gender == "all"


class TestDiscoverAndStore:
    def test_stores_unverified_row(self, db_session):
        discovery = StandardsDiscovery(db_session, FakeSynthesizer([_response()]))

        standard_id = discovery.discover_and_store("lactate_threshold_hr", "Run a faster 10k")

        assert standard_id is not None
        row = db_session.query(MetricStandard).one()
        assert str(row.id) == standard_id
        assert row.verified_by_admin is False
        assert row.is_active is True
        assert row.usage_count == 0
        assert row.source_name == "ACSM Guidelines"

    def test_idempotent_for_existing_metric(self, db_session):
        synth = FakeSynthesizer([_response(), _response()])
        discovery = StandardsDiscovery(db_session, synth)

        first = discovery.discover_and_store("lactate_threshold_hr", "")
        second = discovery.discover_and_store("lactate_threshold_hr", "")

        assert first is not None
        assert second is None
        assert len(synth.calls) == 1
        assert db_session.query(MetricStandard).count() == 1

    def test_store_failure_rolls_back(self, db_session):
        discovery = StandardsDiscovery(db_session, FakeSynthesizer([_response()]))
        discovery.store_standard = MagicMock(side_effect=RuntimeError("db down"))
        db_session.rollback = MagicMock()

        assert discovery.discover_and_store("lactate_threshold_hr", "") is None
        db_session.rollback.assert_called_once()

    @pytest.mark.parametrize("source", ["Random blog", "Wholesome Nutrition"])
    def test_nothing_stored_for_unreputable_source(self, db_session, source):
        discovery = StandardsDiscovery(db_session, FakeSynthesizer([_response(sourceName=source)]))
        assert discovery.discover_and_store("x", "") is None
        assert db_session.query(MetricStandard).count() == 0
