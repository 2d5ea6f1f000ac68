import pytest

from complipilot.features.toolkits.registry import get_toolkit, toolkit_for_form


@pytest.mark.parametrize(
    "code, expected",
    [("GrantGenie", "grantgenie"), (" elev8analyzer ", "elev8analyzer"), ("unknown", "complipilot"), (None, "complipilot")],
)
def test_get_toolkit(code, expected):
    assert get_toolkit(code).code == expected


def test_known_tool_wins_over_form_shape():
    assert toolkit_for_form("grantgenie", {}).code == "grantgenie"


def test_form_shape_picks_toolkit():
    assert toolkit_for_form(None, {"filingType": "Annual Report"}).code == "complipilot"
    diagnostic = toolkit_for_form("", {"businessName": "Acme"})
    assert diagnostic.code == "elev8analyzer"
    assert diagnostic.is_diagnostic is True
