from .detection import (
    detect_identifier_type,
    normalize_identifier,
    detect_related_identifier_type,
)
from .funders import detect_funder_identifier_type
from .doi_validation import (
    FormatCheck,
    DoiResolution,
    DoiResolver,
    validate_doi_format,
    validate_url_format,
    validate_handle_format,
    validate_identifier_format,
)

__all__ = [
    "detect_identifier_type",
    "normalize_identifier",
    "detect_related_identifier_type",
    "detect_funder_identifier_type",
    "FormatCheck",
    "DoiResolution",
    "DoiResolver",
    "validate_doi_format",
    "validate_url_format",
    "validate_handle_format",
    "validate_identifier_format",
]
