"""
Tests for the evidence tier validator.

Tier 1 (standards bodies, peer review) -> 1.0, Tier 2 (named experts) -> 0.85,
anything else is not reputable -> 0.5.
"""
import pytest

from services.goal_plans.constants import EvidenceLevel
from services.goal_plans.evidence import validate_source


class TestTierOneSources:
    @pytest.mark.parametrize("source", [
        "ACSM Guidelines for Exercise Testing, 11th ed.",
        "World Health Organization fact sheet",
        "Journal of Applied Physiology",
        "NSCA Essentials of Strength Training",
        "PubMed meta-analysis",
    ])
    def test_recognized_bodies_score_full_confidence(self, source):
        result = validate_source(source)
        assert result.is_reputable is True
        assert result.confidence_score == 1.0
        assert result.evidence_level == EvidenceLevel.PROFESSIONAL_ORG

    def test_claimed_peer_review_is_kept_for_tier_one(self):
        result = validate_source("The Lancet", "peer_reviewed")
        assert result.evidence_level == EvidenceLevel.PEER_REVIEWED
        assert result.confidence_score == 1.0

    def test_case_insensitive(self):
        assert validate_source("acsm").is_reputable is True


class TestTierTwoSources:
    @pytest.mark.parametrize("source", ["ExRx.net", "Mark Rippetoe - Starting Strength", "ACE Fitness"])
    def test_experts_score_085(self, source):
        result = validate_source(source)
        assert result.is_reputable is True
        assert result.confidence_score == 0.85
        assert result.evidence_level == EvidenceLevel.PROFESSIONAL_ORG

    def test_claimed_peer_review_not_granted_for_tier_two(self):
        result = validate_source("ExRx", "peer_reviewed")
        assert result.evidence_level == EvidenceLevel.PROFESSIONAL_ORG


class TestUnrecognizedSources:
    @pytest.mark.parametrize("source", ["Random fitness blog", "", None])
    def test_not_reputable(self, source):
        result = validate_source(source)
        assert result.is_reputable is False
        assert result.confidence_score == 0.5
        assert result.evidence_level == EvidenceLevel.AI_DISCOVERED
        assert "manual verification" in result.reason

    @pytest.mark.parametrize("source", ["Wholesome Living Blog", "Surface Training Weekly", "Cahall Gym"])
    def test_short_acronyms_must_be_whole_words(self, source):
        # "who", "ace", "aha" inside ordinary words are not endorsements
        assert validate_source(source).is_reputable is False
