"""
Rule-based filing profile resolution.

All matching is case-insensitive substring containment on trimmed input;
the first matching rule wins. No fuzzy matching.
"""

import logging
from typing import List, Optional

from complipilot.features.profiles.catalog import FILING_PROFILES
from complipilot.models.profile import FilingProfile, ProfileMatch

logger = logging.getLogger("complipilot")

CALIFORNIA_KEYS = ("california", "ca")


def _norm(value: Optional[object]) -> str:
    if value is None:
        return ""
    return str(value).lower().strip()


def resolve_profile(filing_type: Optional[str], jurisdiction: Optional[str], entity_type: Optional[str]) -> Optional[FilingProfile]:
    """
    Map a submitted form to a pre-built annual report profile.

    Returns None when no profile applies; callers then fall back to the LLM.
    Entity type is accepted for interface stability but does not take
    part in matching.
    """
    filing = _norm(filing_type)
    juris = _norm(jurisdiction)

    if "annual" in filing:
        if any(key in juris for key in CALIFORNIA_KEYS):
            return FILING_PROFILES["annual_report_ca"]
        return FILING_PROFILES["annual_report_generic"]

    return None


def _is_california(juris: str) -> bool:
    return "california" in juris or juris == "ca"


def _search_order(filing: str, juris: str) -> List[str]:
    keys: List[str] = []

    if "annual report" in filing:
        if _is_california(juris):
            keys.append("annual_report_ca")
        if "delaware" in juris or juris == "de":
            keys.append("annual_report_de")
        keys.append("annual_report_generic")

    if "state tax" in filing or "tax registration" in filing:
        if _is_california(juris):
            keys.append("state_tax_registration_ca")
        keys.append("state_tax_registration_generic")

    if "boir" in filing or "beneficial ownership" in filing:
        keys.append("boir")

    if "dbe" in filing or "mbe" in filing or "certification" in filing:
        keys.append("dbe_mbe_certification")

    if "sam" in filing:
        keys.append("sam_registration")

    return keys


def match_filing_profile(filing_type: Optional[str], jurisdiction: Optional[str], entity_type: Optional[str] = None) -> Optional[ProfileMatch]:
    """Resolve against the full catalog, most specific profile first."""
    filing = _norm(filing_type)
    juris = _norm(jurisdiction)

    for key in _search_order(filing, juris):
        profile = FILING_PROFILES.get(key)
        if profile is not None:
            is_generic = "_generic" in key
            return ProfileMatch(
                profile=profile,
                is_generic=is_generic,
                match_type="generic" if is_generic else "specific",
            )

    logger.info("profile.no_match", extra={"event_type": "profile_resolution"})
    return None
