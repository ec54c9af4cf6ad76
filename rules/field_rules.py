"""Single-collection rules for licenses and related identifiers."""

from typing import Any, Dict, List

from config.models import FieldError
from services.identifiers import validate_identifier_format
from .base import BaseRule, RuleContext


class LicenseRule(BaseRule):
    """At least one license, no duplicates."""

    name = "license"
    field = "licenses"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        licenses = self._entries(data, "licenses")
        if not licenses:
            return [self._error(self.field, "At least one license must be selected.")]

        errors = []
        seen = set()
        for index, license_id in enumerate(licenses):
            if license_id in seen:
                errors.append(self._error(f"licenses.{index}", f"The licenses.{index} field has a duplicate value."))
            seen.add(license_id)
        return errors


class RelatedIdentifierRule(BaseRule):
    """Identifiers declared as DOI, URL or Handle must look like one."""

    name = "related_identifier"
    field = "relatedIdentifiers"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        errors = []
        for index, related in enumerate(self._entries(data, "relatedIdentifiers")):
            if not isinstance(related, dict):
                continue
            check = validate_identifier_format(related.get("identifier") or "", related.get("identifierType") or "")
            if not check.is_valid:
                errors.append(self._error(f"relatedIdentifiers.{index}.identifier", check.message))
        return errors
