"""
complipilot/models/profile.py

Filing profile models.

Profiles are static, code-defined compliance templates (see
complipilot.features.profiles.catalog). They are never persisted.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class ProfileScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    filing_types: Tuple[str, ...]
    states: Tuple[str, ...]  # "*" means every state
    entity_types: Tuple[str, ...]


class ChecklistItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str
    required: bool
    category: str


class TimelineItem(BaseModel):
    """A milestone positioned relative to the filing deadline."""
    model_config = ConfigDict(frozen=True)

    milestone: str
    owner: str
    offset_days: int  # negative = before the deadline
    notes: str


class RiskItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    risk: str
    severity: str
    likelihood: str
    mitigation: str


class ReferenceLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    url: str
    description: str


class FilingProfile(BaseModel):
    """
    Static template of checklist, timeline, risks and links for one
    compliance filing category.
    """
    model_config = ConfigDict(frozen=True)

    slug: str
    name: str
    scope: ProfileScope
    checklist: Tuple[ChecklistItem, ...]
    suggested_items: Tuple[str, ...] = ()
    timeline: Tuple[TimelineItem, ...]
    risks: Tuple[RiskItem, ...]
    links: Tuple[ReferenceLink, ...]

    def item(self, item_id: str) -> Optional[ChecklistItem]:
        for entry in self.checklist:
            if entry.id == item_id:
                return entry
        return None

    def categories(self) -> List[str]:
        """Checklist categories in first-seen order."""
        seen: List[str] = []
        for entry in self.checklist:
            if entry.category not in seen:
                seen.append(entry.category)
        return seen


class ProfileMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: FilingProfile
    is_generic: bool
    match_type: str  # "generic" | "specific"
