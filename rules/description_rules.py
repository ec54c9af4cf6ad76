"""Rules for descriptions."""

from typing import Any, Dict, List

from config.models import DescriptionType, FieldError
from .base import BaseRule, RuleContext


class AbstractRule(BaseRule):
    """A non-empty abstract is mandatory."""

    name = "abstract"
    field = "descriptions"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        for description in self._entries(data, "descriptions"):
            if not isinstance(description, dict):
                continue
            text = description.get("description")
            if description.get("descriptionType") == DescriptionType.ABSTRACT.value \
                    and isinstance(text, str) and text.strip():
                return []
        return [self._error(self.field, "An Abstract description is required.")]
