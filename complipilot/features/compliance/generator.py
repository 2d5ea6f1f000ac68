"""
Deterministic compliance report generator.

Builds a six-section Markdown report from a filing profile and the
submitted form; no LLM involved:

1. Executive Compliance Summary
2. Filing Requirements Checklist
3. Compliance Timeline
4. Risk Matrix
5. Strategic Recommendations
6. Official References
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from complipilot.features.profiles.resolver import match_filing_profile
from complipilot.models.compliance import ComplianceForm, GeneratedReport
from complipilot.models.profile import FilingProfile, ProfileMatch

logger = logging.getLogger("complipilot")

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

DATE_PENDING = "[Date pending]"
DEADLINE_PENDING = "[Deadline pending]"
JURISDICTION_PLACEHOLDER = "[Jurisdiction]"
PENDING_INPUT = "[Pending Input]"
SUGGESTED_BADGE = " (Suggested by CompliPilot)"
SELECTION_PREFIX_LEN = 10
USER_RISK_MAX_LEN = 100

DISCLAIMER = (
    "This report is for informational purposes only and does not constitute legal, "
    "tax, or financial advice. Consult with licensed professionals for guidance "
    "specific to your situation."
)


class ProfileNotFoundError(LookupError):
    """No catalog profile matches the submitted filing type."""


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date(value: Optional[date]) -> str:
    if value is None:
        return DATE_PENDING
    return f"{MONTHS[value.month - 1]} {value.day}, {value.year}"


class ComplianceGenerator:
    def __init__(self, resolver: Callable[..., Optional[ProfileMatch]] = match_filing_profile):
        self.resolver = resolver

    def generate(self, form: Union[ComplianceForm, Mapping[str, Any]]) -> GeneratedReport:
        if not isinstance(form, ComplianceForm):
            form = ComplianceForm.model_validate(dict(form))

        match = self.resolver(form.filing_type, form.jurisdiction, form.entity_type)
        if match is None:
            raise ProfileNotFoundError("Unable to find matching filing profile")

        profile = match.profile
        sections = {
            "executiveSummary": self.executive_summary(form),
            "requirementsChecklist": self.checklist(form, profile),
            "timeline": self.timeline(form, profile),
            "riskMatrix": self.risk_matrix(form, profile),
            "recommendations": self.recommendations(form, profile),
            "references": self.references(profile),
        }

        logger.info(
            "compliance.report_generated",
            extra={"event_type": "compliance_report", "tool": profile.slug},
        )
        return GeneratedReport(
            output=self.format_output(sections),
            sections=sections,
            profile_used=profile.name,
            profile_slug=profile.slug,
            is_generic=match.is_generic,
            match_type=match.match_type,
        )

    # -- sections ---------------------------------------------------------

    def executive_summary(self, form: ComplianceForm) -> str:
        entity_display = (
            f"{form.entity_name} ({form.entity_type})" if form.entity_name else (form.entity_type or "")
        )
        jurisdiction_display = form.jurisdiction or JURISDICTION_PLACEHOLDER
        deadline_display = format_date(parse_date(form.deadline)) if form.deadline else DEADLINE_PENDING

        para1 = (
            f"This compliance report addresses the {form.filing_type} requirement for {entity_display}, "
            f"operating in {jurisdiction_display}. This filing ensures your business maintains good "
            "standing with regulatory authorities and preserves liability protections, operational "
            "privileges, and legal status."
        )
        para2 = (
            f"Your filing deadline is {deadline_display}. Late submission may result in penalties, "
            "loss of good standing, or administrative dissolution. This report provides a structured "
            "roadmap including required documents, key milestones, risk mitigation strategies, and "
            "actionable next steps to ensure timely and compliant submission."
        )
        return f"{para1}\n\n{para2}"

    def checklist(self, form: ComplianceForm, profile: FilingProfile) -> List[Dict[str, str]]:
        selected = set(form.requirements)
        items = []
        for item in profile.checklist:
            prefix = item.label.lower()[:SELECTION_PREFIX_LEN]
            is_selected = (
                item.id in selected
                or item.label in selected
                or any(prefix in sel.lower() for sel in selected)
            )
            is_suggested = not is_selected and item.id in profile.suggested_items

            label = item.label + (" *" if item.required else "") + (SUGGESTED_BADGE if is_suggested else "")
            items.append(
                {
                    "checkbox": "✓" if is_selected else "□",
                    "label": label,
                    "description": item.description,
                    "category": item.category,
                }
            )
        return items

    def timeline(self, form: ComplianceForm, profile: FilingProfile) -> List[Dict[str, str]]:
        if not form.deadline:
            return [
                {
                    "milestone": "[Timeline unavailable]",
                    "owner": "[Pending]",
                    "due": "[Deadline required]",
                    "notes": "Please provide filing deadline to generate timeline",
                }
            ]

        deadline = parse_date(form.deadline)
        rows = []
        for entry in profile.timeline:
            due = deadline + timedelta(days=entry.offset_days) if deadline else None
            rows.append(
                {
                    "milestone": entry.milestone,
                    "owner": entry.owner,
                    "due": format_date(due),
                    "notes": entry.notes,
                }
            )
        return rows

    def risk_matrix(self, form: ComplianceForm, profile: FilingProfile) -> List[Dict[str, str]]:
        risks = []
        if form.risks and form.risks.strip():
            risks.append(
                {
                    "risk": form.risks[:USER_RISK_MAX_LEN],
                    "severity": "Medium",
                    "likelihood": "Medium",
                    "mitigation": form.mitigation or "Review with compliance advisor",
                }
            )
        for entry in profile.risks:
            risks.append(
                {
                    "risk": entry.risk,
                    "severity": entry.severity,
                    "likelihood": entry.likelihood,
                    "mitigation": entry.mitigation,
                }
            )
        if not risks:
            risks.append(
                {"risk": PENDING_INPUT, "severity": PENDING_INPUT, "likelihood": PENDING_INPUT, "mitigation": PENDING_INPUT}
            )
        return risks

    def recommendations(self, form: ComplianceForm, profile: FilingProfile) -> List[Dict[str, Any]]:
        first_reminder = "30 days before deadline" if form.deadline else "immediately upon setting deadline"
        recs = [
            {
                "number": 1,
                "action": "Create compliance calendar",
                "detail": (
                    "Add all timeline milestones to your calendar with email/SMS reminders. "
                    f"Set first reminder {first_reminder}."
                ),
            },
            {
                "number": 2,
                "action": "Assign ownership and accountability",
                "detail": (
                    "Designate a responsible party for each checklist item and timeline milestone. "
                    "For external tasks (CPA, attorney), confirm availability now."
                ),
            },
        ]

        if form.jurisdiction and profile.links:
            recs.append(
                {
                    "number": 3,
                    "action": "Set up portal access",
                    "detail": (
                        f"Create account at {profile.links[0].label} if not already registered. "
                        "Confirm login credentials and payment methods are current."
                    ),
                }
            )
        else:
            recs.append(
                {
                    "number": 3,
                    "action": "Identify filing portal",
                    "detail": (
                        "Research official state/federal portal for online filing. "
                        "Create account and verify accepted payment methods."
                    ),
                }
            )

        recs.extend(
            [
                {
                    "number": 4,
                    "action": "Pre-review all documents",
                    "detail": (
                        "Conduct internal review of all checklist items 14 days before deadline. "
                        "Verify accuracy, completeness, and consistency across documents."
                    ),
                },
                {
                    "number": 5,
                    "action": "Confirm acceptance and retain proof",
                    "detail": (
                        "After submission, save confirmation number, receipt, and filed documents. "
                        "Verify processing within 5-7 business days and follow up if no acknowledgment received."
                    ),
                },
            ]
        )
        return recs

    def references(self, profile: FilingProfile) -> Dict[str, Any]:
        return {
            "links": [link.model_dump() for link in profile.links],
            "disclaimer": DISCLAIMER,
        }

    # -- output -----------------------------------------------------------

    def format_output(self, sections: Dict[str, Any]) -> str:
        parts: List[str] = []

        parts.append("# Executive Compliance Summary\n\n")
        parts.append(sections["executiveSummary"] + "\n\n")
        parts.append("---\n\n")

        parts.append("## Filing Requirements Checklist\n\n")
        current_category = ""
        for item in sections["requirementsChecklist"]:
            if item["category"] and item["category"] != current_category:
                if current_category:
                    parts.append("\n")
                parts.append(f"**{item['category']}:**\n")
                current_category = item["category"]
            parts.append(f"{item['checkbox']} **{item['label']}**\n")
            parts.append(f"   {item['description']}\n\n")
        parts.append("---\n\n")

        parts.append("## Compliance Timeline\n\n")
        parts.append("| Milestone | Owner | Due Date | Notes |\n")
        parts.append("|-----------|-------|----------|-------|\n")
        for row in sections["timeline"]:
            parts.append(f"| {row['milestone']} | {row['owner']} | {row['due']} | {row['notes']} |\n")
        parts.append("\n---\n\n")

        parts.append("## Risk Matrix\n\n")
        parts.append("| Risk | Severity | Likelihood | Mitigation |\n")
        parts.append("|------|----------|------------|------------|\n")
        for risk in sections["riskMatrix"]:
            parts.append(f"| {risk['risk']} | {risk['severity']} | {risk['likelihood']} | {risk['mitigation']} |\n")
        parts.append("\n---\n\n")

        parts.append("## Strategic Recommendations\n\n")
        for rec in sections["recommendations"]:
            parts.append(f"{rec['number']}. **{rec['action']}**\n")
            parts.append(f"   {rec['detail']}\n\n")
        parts.append("---\n\n")

        parts.append("## Official References\n\n")
        links = sections["references"]["links"]
        if links:
            for link in links:
                parts.append(f"- **{link['label']}**: [{link['url']}]({link['url']})\n")
                parts.append(f"  {link['description']}\n\n")
        else:
            parts.append("*Contact your state or federal agency for official filing portals.*\n\n")
        parts.append(f"**Disclaimer:** {sections['references']['disclaimer']}\n")

        return "".join(parts)
