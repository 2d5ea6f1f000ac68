"""Deterministic compliance report API (profile-driven, no LLM)."""

from typing import Any, Dict

from fastapi import APIRouter, Body
from pydantic import ValidationError as PydanticValidationError

from complipilot.core.errors import NotFoundError, ValidationError
from complipilot.features.compliance.generator import ComplianceGenerator, ProfileNotFoundError

router = APIRouter(prefix="/api/compliance", tags=["compliance"])

_generator = ComplianceGenerator()


@router.post("/report")
def compliance_report(form: Dict[str, Any] = Body(...)):
    """Six-section Markdown report from the best matching filing profile.

    404 when no profile matches the filing type.
    """
    try:
        report = _generator.generate(form)
    except ProfileNotFoundError as e:
        raise NotFoundError(str(e))
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError("Invalid input", extra={"fields": fields})
    return report.to_dict()
