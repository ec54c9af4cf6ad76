"""Rules for resource titles."""

from typing import Any, Dict, List

from config.models import FieldError
from services.curation.vocabularies import is_main_title
from .base import BaseRule, RuleContext


class MainTitleRule(BaseRule):
    """At least one title must be typed as the main title."""

    name = "main_title"
    field = "titles"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        for title in self._entries(data, "titles"):
            if isinstance(title, dict) and is_main_title(title.get("titleType")):
                return []
        return [self._error(self.field, "At least one title must be provided as a Main Title.")]


class TitleTypeRule(BaseRule):
    """Every title type has to exist in the title type vocabulary."""

    name = "title_type"
    field = "titles"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        errors = []
        for index, title in enumerate(self._entries(data, "titles")):
            if not isinstance(title, dict):
                continue
            title_type = title.get("titleType")
            # missing types are reported by the shape validation
            if title_type and not context.title_types.is_known(title_type):
                field = f"titles.{index}.titleType"
                errors.append(self._error(field, f"The selected {field} is invalid."))
        return errors
