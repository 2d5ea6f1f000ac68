"""
complipilot/models/compliance.py

Report generation request/response models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ComplianceForm(BaseModel):
    """Submitted compliance form (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    entity_name: Optional[str] = Field(default=None, alias="entityName")
    entity_type: Optional[str] = Field(default=None, alias="entityType")
    jurisdiction: Optional[str] = None
    filing_type: Optional[str] = Field(default=None, alias="filingType")
    deadline: Optional[str] = None
    requirements: List[str] = Field(default_factory=list)
    risks: Optional[str] = None
    mitigation: Optional[str] = None

    @field_validator("requirements", mode="before")
    @classmethod
    def _coerce_requirements(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return [str(v) for v in value if v is not None]


class GenerateRequest(BaseModel):
    """Body of POST /api/generate."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    form_data: Optional[Dict[str, Any]] = Field(default=None, alias="formData")
    tool: Optional[str] = None


class GeneratedReport(BaseModel):
    """Deterministic generator output."""
    output: str  # Markdown
    sections: Dict[str, Any]
    profile_used: str
    profile_slug: str
    is_generic: bool
    match_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output": self.output,
            "sections": self.sections,
            "profileUsed": self.profile_used,
            "profileSlug": self.profile_slug,
            "isGeneric": self.is_generic,
            "matchType": self.match_type,
        }
