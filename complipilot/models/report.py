"""
complipilot/models/report.py

Stored report models. Wire format is camelCase.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Client-supplied keys that must never reach the store
OWNERSHIP_FIELDS = ("userId", "user_id", "ownerId", "owner_id", "id", "createdAt", "created_at")

DEFAULT_TOOLKIT_CODE = "complipilot"


class ReportCreate(BaseModel):
    """Body of POST /api/reports/save (ownership fields are stripped before validation)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1)
    entity_name: str = Field(alias="entityName")
    entity_type: str = Field(alias="entityType")
    jurisdiction: str
    filing_type: str = Field(alias="filingType")
    deadline: Optional[str] = None
    html_content: str = Field(alias="htmlContent", min_length=1)
    toolkit_code: Optional[str] = Field(default=None, alias="toolkitCode")
    metadata: Optional[Dict[str, Any]] = None


class ReportSummary(BaseModel):
    """List view: everything except the HTML body."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    entity_name: Optional[str] = None
    entity_type: Optional[str] = None
    jurisdiction: Optional[str] = None
    filing_type: Optional[str] = None
    deadline: Optional[str] = None
    checksum: Optional[str] = None
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "entityName": self.entity_name,
            "entityType": self.entity_type,
            "jurisdiction": self.jurisdiction,
            "filingType": self.filing_type,
            "deadline": self.deadline,
            "checksum": self.checksum,
            "createdAt": self.created_at.isoformat(),
        }


class ComplianceReport(ReportSummary):
    user_id: str
    toolkit_code: str
    html_content: str
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "userId": self.user_id,
                "toolkitCode": self.toolkit_code,
                "htmlContent": self.html_content,
                "metadata": self.metadata or {},
            }
        )
        return data
