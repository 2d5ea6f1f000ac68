"""Tests for filing profile resolution."""

import pytest

from complipilot.features.profiles.catalog import FILING_PROFILES, get_profile
from complipilot.features.profiles.resolver import match_filing_profile, resolve_profile


def test_california_annual_report_resolves_to_ca_profile():
    profile = resolve_profile("Annual Report", "California", "LLC")
    assert profile is not None
    assert profile.slug == "annual_report_ca"


def test_other_state_annual_report_resolves_to_generic():
    profile = resolve_profile("Annual Report", "Texas", "LLC")
    assert profile is not None
    assert profile.slug == "annual_report_generic"


def test_non_annual_filing_returns_none():
    assert resolve_profile("BOIR", "Texas", "LLC") is None
    assert resolve_profile("", "California", "LLC") is None
    assert resolve_profile(None, None, None) is None


@pytest.mark.parametrize("jurisdiction", ["california", "CALIFORNIA", "  CA  ", "ca", "Southern California"])
def test_california_matching_is_case_insensitive_substring(jurisdiction):
    assert resolve_profile("annual report", jurisdiction, None).slug == "annual_report_ca"


def test_non_string_inputs_are_coerced():
    assert resolve_profile(123, "CA", None) is None
    assert resolve_profile("Annual Report", None, 5).slug == "annual_report_generic"


def test_entity_type_does_not_affect_resolution():
    a = resolve_profile("Annual Report", "Texas", "LLC")
    b = resolve_profile("Annual Report", "Texas", "Sole Proprietorship")
    assert a.slug == b.slug


def test_annual_keyword_anywhere_in_filing_type():
    assert resolve_profile("LLC annual filing", "Nevada", None).slug == "annual_report_generic"


def test_catalog_has_all_profiles():
    assert set(FILING_PROFILES) == {
        "annual_report_generic",
        "annual_report_ca",
        "annual_report_de",
        "state_tax_registration_generic",
        "state_tax_registration_ca",
        "boir",
        "dbe_mbe_certification",
        "sam_registration",
    }
    for profile in FILING_PROFILES.values():
        assert profile.checklist
        assert profile.timeline
        for suggested in profile.suggested_items:
            assert profile.item(suggested) is not None


def test_get_profile_unknown_slug():
    assert get_profile("nope") is None


@pytest.mark.parametrize(
    "filing, jurisdiction, slug, is_generic",
    [
        ("Annual Report", "California", "annual_report_ca", False),
        ("Annual Report", "Delaware", "annual_report_de", False),
        ("Annual Report", "DE", "annual_report_de", False),
        ("Annual Report", "Ohio", "annual_report_generic", True),
        ("State Tax Registration", "CA", "state_tax_registration_ca", False),
        ("State Tax Registration", "Oregon", "state_tax_registration_generic", True),
        ("BOIR", "Texas", "boir", False),
        ("Beneficial Ownership Information Report", "", "boir", False),
        ("DBE Certification", "Illinois", "dbe_mbe_certification", False),
        ("SAM.gov Registration", "Federal", "sam_registration", False),
    ],
)
def test_match_filing_profile_search_order(filing, jurisdiction, slug, is_generic):
    match = match_filing_profile(filing, jurisdiction, "LLC")
    assert match is not None
    assert match.profile.slug == slug
    assert match.is_generic is is_generic
    assert match.match_type == ("generic" if is_generic else "specific")


def test_match_filing_profile_no_match():
    assert match_filing_profile("Liquor License", "Texas") is None
