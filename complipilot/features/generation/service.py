"""
complipilot/features/generation/service.py

Report generation for POST /api/generate.

Flow: validate -> usage check -> static profile (compliance toolkits) or
LLM -> usage increment -> response. A failed generation is never counted.
"""

import html
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from complipilot.core.errors import UsageLimitError, ValidationError
from complipilot.core.logging import log_event
from complipilot.features.compliance.generator import ComplianceGenerator, ProfileNotFoundError
from complipilot.features.generation import llm
from complipilot.features.generation.prompts import build_user_prompt, system_prompt_for
from complipilot.features.profiles.resolver import resolve_profile
from complipilot.features.toolkits.registry import Toolkit, toolkit_for_form
from complipilot.features.usage.service import check_usage, increment_usage, limit_message, normalize_tool
from complipilot.models.compliance import ComplianceForm, GenerateRequest
from complipilot.models.profile import FilingProfile

logger = logging.getLogger("complipilot")

SOURCE_PROFILE = "profile"
SOURCE_LLM = "llm"


def render_profile_html(profile: FilingProfile) -> str:
    items = "\n".join(
        f"<li><strong>{html.escape(item.label)}:</strong> {html.escape(item.description)}</li>"
        for item in profile.checklist
    )
    return (
        f"<h2>Filing Profile: {html.escape(profile.name)}</h2>\n"
        "<h3>Requirements Checklist</h3>\n"
        f"<ul>{items}</ul>"
    )


def parse_compliance_form(form: Mapping[str, Any]) -> ComplianceForm:
    try:
        return ComplianceForm.model_validate(dict(form))
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError(
            f"Invalid formData: {', '.join(fields)}" if fields else "Invalid formData",
            extra={"fields": fields},
        )


def _deterministic_markdown(form: ComplianceForm) -> Optional[str]:
    try:
        return ComplianceGenerator().generate(form).output
    except ProfileNotFoundError:
        return None


async def _generate(
    form: Mapping[str, Any], compliance_form: Optional[ComplianceForm], toolkit: Toolkit
) -> Dict[str, Any]:
    if compliance_form is not None:
        profile = resolve_profile(
            compliance_form.filing_type, compliance_form.jurisdiction, compliance_form.entity_type
        )
        if profile is not None:
            logger.info(
                "generate.profile_hit",
                extra={"tool": toolkit.code, "event_type": "generate", "profile": profile.slug},
            )
            result = {
                "reportHtml": render_profile_html(profile),
                "source": SOURCE_PROFILE,
                "profile": {"slug": profile.slug, "name": profile.name},
            }
            markdown = _deterministic_markdown(compliance_form)
            if markdown:
                result["markdown"] = markdown
            return result

    logger.info("generate.llm_fallback", extra={"tool": toolkit.code, "event_type": "generate"})
    content = await llm.complete(
        system_prompt_for(toolkit.form_type),
        build_user_prompt(toolkit.form_type, form),
    )
    return {"reportHtml": content, "source": SOURCE_LLM, "profile": None}


async def generate_report(db: Session, ip: Optional[str], request: GenerateRequest) -> Dict[str, Any]:
    """
    Generate one report for the caller's IP.

    Raises:
        ValidationError: formData missing or malformed
        UsageLimitError: caller is at the cap (before or after generation)
        UpstreamError: LLM failure or timeout
    """
    form = request.form_data
    if not form or not isinstance(form, Mapping):
        raise ValidationError("formData is required")

    tool = normalize_tool(request.tool)
    toolkit = toolkit_for_form(request.tool, form)
    # Diagnostic forms carry free-form fields and go to the LLM as submitted
    compliance_form = None if toolkit.is_diagnostic else parse_compliance_form(form)

    status = check_usage(db, ip, tool)
    if not status.allowed:
        raise UsageLimitError(limit_message(status.limit), count=status.count, limit=status.limit, tool=tool)

    result = await _generate(form, compliance_form, toolkit)

    increment = increment_usage(db, ip, tool)
    if increment.limit_reached:
        raise UsageLimitError(
            limit_message(increment.limit), count=increment.count, limit=increment.limit, tool=tool
        )

    result["usage"] = {
        "count": increment.count,
        "limit": increment.limit,
        "tool": increment.tool,
        "mode": increment.mode,
    }
    log_event(
        "info",
        "generate.complete",
        tool=tool,
        event_type="generate",
        extra={"source": result["source"], "count": increment.count},
    )
    return result
