"""
Toolkit registry.

A toolkit is a product surface (CompliPilot, GrantGenie, Elev8 Analyzer)
sharing this backend. It decides which prompt family a generation uses,
how exported PDFs are titled and named, and scopes stored reports.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

FORM_COMPLIANCE = "compliance"
FORM_DIAGNOSTIC = "diagnostic"


class Toolkit(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    tagline: str
    form_type: str  # "compliance" | "diagnostic"
    pdf_filename_prefix: str
    primary_color_rgb: Tuple[int, int, int]

    @property
    def is_diagnostic(self) -> bool:
        return self.form_type == FORM_DIAGNOSTIC


TOOLKITS: Dict[str, Toolkit] = {
    "complipilot": Toolkit(
        code="complipilot",
        name="CompliPilot",
        tagline="Compliance intelligence for growing businesses",
        form_type=FORM_COMPLIANCE,
        pdf_filename_prefix="CompliPilot_Compliance_Report",
        primary_color_rgb=(79, 195, 247),
    ),
    "grantgenie": Toolkit(
        code="grantgenie",
        name="GrantGenie",
        tagline="Unlock grant opportunities with AI-powered assistance",
        form_type=FORM_COMPLIANCE,
        pdf_filename_prefix="GrantGenie_Compliance_Report",
        primary_color_rgb=(79, 195, 247),
    ),
    "elev8analyzer": Toolkit(
        code="elev8analyzer",
        name="Elev8 Analyzer",
        tagline="Elevate Your Business - 8 Pillars to Growth",
        form_type=FORM_DIAGNOSTIC,
        pdf_filename_prefix="Elev8_Business_Analysis",
        primary_color_rgb=(8, 145, 178),
    ),
}

DEFAULT_TOOLKIT = "complipilot"


def get_toolkit(code: Optional[str]) -> Toolkit:
    """Look up a toolkit by code, falling back to CompliPilot for unknown codes."""
    key = (code or "").strip().lower()
    return TOOLKITS.get(key) or TOOLKITS[DEFAULT_TOOLKIT]


def toolkit_for_form(tool: Optional[str], form: Mapping[str, Any]) -> Toolkit:
    """
    Pick the toolkit for a generation request.

    A known tool code wins; otherwise a form carrying a filing type is a
    compliance form and anything else is a business diagnostic.
    """
    key = (tool or "").strip().lower()
    if key in TOOLKITS:
        return TOOLKITS[key]
    if form.get("filingType"):
        return TOOLKITS[DEFAULT_TOOLKIT]
    return TOOLKITS["elev8analyzer"]
