"""Curation service: normalization, validation, uploads and CSV import."""

from .normalizer import MetadataNormalizer, normalize_submission
from .validator import SubmissionValidator
from .vocabularies import TitleTypeLookup
from .csv_import import AgentCSVParser
from .upload import UploadValidationError, validate_xml_upload
from .responses import validation_error_response, upload_error_response

__all__ = [
    "MetadataNormalizer",
    "normalize_submission",
    "SubmissionValidator",
    "TitleTypeLookup",
    "AgentCSVParser",
    "UploadValidationError",
    "validate_xml_upload",
    "validation_error_response",
    "upload_error_response",
]
