"""Shape and cross-field validation of normalized submissions."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from config.models import (
    AgentType,
    DroppedEntry,
    FieldError,
    NormalizationResult,
    ResourceSubmission,
    ValidationReport,
)
from rules.base import BaseRule, RuleContext, RuleFactory
from .vocabularies import TitleTypeLookup

logger = logging.getLogger(__name__)


REQUIRED_ERROR_TYPES = {"missing", "int_type", "int_parsing", "string_type", "float_type", "enum"}
AGENT_TAGS = {t.value for t in AgentType}
PATTERN_MESSAGES = {
    "email": "The {field} field must be a valid email address.",
    "website": "The {field} field must be a valid URL.",
    "startTime": "The {field} field must match the format H:i or H:i:s.",
    "endTime": "The {field} field must match the format H:i or H:i:s.",
}


def error_location_to_path(loc: Tuple[Union[str, int], ...]) -> str:
    """('authors', 2, 'person', 'lastName') -> 'authors.2.lastName'."""
    parts: List[str] = []
    previous = None
    for segment in loc:
        # tagged-union locations carry the discriminator value after the index
        if isinstance(previous, int) and segment in AGENT_TAGS:
            previous = segment
            continue
        parts.append(str(segment))
        previous = segment
    return ".".join(parts)


def _message_for(error: Dict[str, Any], field: str) -> str:
    if error.get("type") in REQUIRED_ERROR_TYPES and error.get("input") is None:
        return f"The {field} field is required."
    if error.get("type") == "string_pattern_mismatch":
        leaf = field.rsplit(".", 1)[-1]
        if leaf in PATTERN_MESSAGES:
            return PATTERN_MESSAGES[leaf].format(field=field)
    return error.get("msg", "Invalid value.")


class SubmissionValidator:
    """Runs model validation followed by every cross-field rule."""

    def __init__(
        self,
        title_types: Optional[TitleTypeLookup] = None,
        rules: Optional[Sequence[BaseRule]] = None,
    ):
        self.title_types = title_types or TitleTypeLookup()
        self.rules = list(rules) if rules is not None else RuleFactory.create_all()

    def validate(
        self,
        normalized: Union[Dict[str, Any], NormalizationResult],
        dropped: Optional[List[DroppedEntry]] = None,
    ) -> ValidationReport:
        """Collect every error of a normalized submission; never raises for bad data."""
        if isinstance(normalized, NormalizationResult):
            dropped = normalized.dropped if dropped is None else dropped
            data = normalized.data
        else:
            data = normalized

        report = ValidationReport()
        report.extend(self.check_shape(data))

        context = RuleContext(title_types=self.title_types, dropped=dropped)
        for rule in self.rules:
            report.extend(rule.execute(data, context))

        if report.is_valid:
            logger.info("Submission passed validation")
        else:
            logger.info("Submission failed validation with %d error(s)", report.error_count)
        return report

    def check_shape(self, data: Dict[str, Any]) -> List[FieldError]:
        """Field-level constraints declared on the submission models."""
        try:
            ResourceSubmission.model_validate(data)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = error_location_to_path(error["loc"])
                errors.append(FieldError(field=field, message=_message_for(error, field)))
            return errors
        return []

    def parse(self, data: Dict[str, Any]) -> ResourceSubmission:
        """Typed view of a submission that already passed validation."""
        return ResourceSubmission.model_validate(data)
