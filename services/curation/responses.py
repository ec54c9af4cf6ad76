"""HTTP 422 envelopes for validation and upload failures."""

import logging
from typing import Any, Dict, Optional, Tuple

from config.models import ValidationReport
from .upload import UploadValidationError

logger = logging.getLogger(__name__)

UNPROCESSABLE_ENTITY = 422


def validation_error_response(report: ValidationReport) -> Tuple[int, Dict[str, Any]]:
    """Laravel-style `{message, errors}` body for a failed validation."""
    if report.is_valid:
        raise ValueError("Cannot build an error response for a valid report")
    return UNPROCESSABLE_ENTITY, report.to_response()


def upload_error_response(
    error: UploadValidationError,
    filename: Optional[str] = None,
    user: Optional[str] = None,
    ip: Optional[str] = None,
) -> Tuple[int, Dict[str, Any]]:
    """Structured body for a rejected upload; the failure is logged with its context."""
    logger.warning(
        "XML upload rejected: %s",
        error.message,
        extra={
            "upload_filename": filename,
            "upload_user": user,
            "upload_ip": ip,
            "error_code": error.kind.value,
        },
    )

    body = {
        "success": False,
        "error": {
            "category": error.kind.category,
            "code": error.kind.value,
            "message": error.message,
            "field": error.field,
            "row": error.row,
            "identifier": error.identifier,
        },
    }
    return UNPROCESSABLE_ENTITY, body
