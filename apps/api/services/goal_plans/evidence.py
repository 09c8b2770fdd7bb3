"""
Evidence Tier Validator

Classifies a claimed information source into a trust tier. This is the
single gate deciding whether an AI-discovered standard is ever persisted.

    Tier 1: standards bodies and peer-reviewed indicators -> 1.0
    Tier 2: named domain experts / established resources  -> 0.85
    Other:  not reputable, needs manual verification       -> 0.5

Pure function, no I/O.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .constants import EvidenceLevel

TIER1_SOURCES = (
    "acsm", "american college of sports medicine",
    "nsca", "national strength and conditioning association",
    "who", "world health organization",
    "aha", "american heart association",
    "cdc", "centers for disease control",
    "nih", "national institutes of health",
    "pubmed", "peer-reviewed", "peer reviewed", "journal", "lancet", "jama", "nejm",
)

TIER2_SOURCES = (
    "jack daniels", "mark rippetoe", "lon kilgore",
    "exrx", "strength level", "symmetric strength",
    "ace", "american council on exercise",
    "nasm", "national academy of sports medicine",
)

TIER1_SCORE = 1.0
TIER2_SCORE = 0.85
UNVERIFIED_SCORE = 0.5

# Acronyms this short appear inside ordinary words ("whole", "face"),
# so they only count as whole words.
_WORD_BOUNDARY_MAX_LEN = 3


@dataclass(frozen=True)
class SourceValidation:
    is_reputable: bool
    evidence_level: EvidenceLevel
    confidence_score: float
    reason: str


def _mentions(source: str, marker: str) -> bool:
    if len(marker) <= _WORD_BOUNDARY_MAX_LEN:
        return re.search(rf"\b{re.escape(marker)}\b", source) is not None
    return marker in source


def validate_source(source_name: Optional[str], claimed_evidence_level: Optional[str] = None) -> SourceValidation:
    """
    Validate source credibility.

    Args:
        source_name: Name of the source as claimed (e.g. "ACSM Guidelines, 11th ed.")
        claimed_evidence_level: Evidence level the caller claims for it

    Returns:
        SourceValidation with tier-derived level and score
    """
    source = (source_name or "").lower()

    if any(_mentions(source, marker) for marker in TIER1_SOURCES):
        level = (
            EvidenceLevel.PEER_REVIEWED
            if claimed_evidence_level == EvidenceLevel.PEER_REVIEWED.value
            else EvidenceLevel.PROFESSIONAL_ORG
        )
        return SourceValidation(
            is_reputable=True,
            evidence_level=level,
            confidence_score=TIER1_SCORE,
            reason="Recognized professional organization or peer-reviewed source",
        )

    if any(_mentions(source, marker) for marker in TIER2_SOURCES):
        return SourceValidation(
            is_reputable=True,
            evidence_level=EvidenceLevel.PROFESSIONAL_ORG,
            confidence_score=TIER2_SCORE,
            reason="Established expert or professional resource",
        )

    return SourceValidation(
        is_reputable=False,
        evidence_level=EvidenceLevel.AI_DISCOVERED,
        confidence_score=UNVERIFIED_SCORE,
        reason="Source not in recognized list - requires manual verification",
    )
