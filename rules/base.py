"""
Base classes for cross-field validation rules.
"""

import abc
import logging
import time
from typing import Any, Dict, List, Optional

from config.models import DroppedEntry, FieldError

logger = logging.getLogger(__name__)


class RuleContext:
    """Shared lookups and normalization side data handed to every rule."""

    def __init__(
        self,
        title_types=None,
        dropped: Optional[List[DroppedEntry]] = None,
    ):
        if title_types is None:
            from services.curation.vocabularies import TitleTypeLookup
            title_types = TitleTypeLookup()
        self.title_types = title_types
        self.dropped = dropped or []

    def dropped_in(self, collection: str) -> List[DroppedEntry]:
        return [entry for entry in self.dropped if entry.collection == collection]


class BaseRule(abc.ABC):
    """Abstract base class for all validation rules."""

    name: str = "rule"
    field: str = ""

    # ------------------------------------------------------------------
    # Rules must implement only this
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Execution wrapper
    # ------------------------------------------------------------------
    def execute(self, data: Dict[str, Any], context: Optional[RuleContext] = None) -> List[FieldError]:
        start = time.time()
        context = context or RuleContext()

        try:
            errors = self.evaluate(data, context)
        except Exception as e:
            logger.exception(f"Rule {self.name} failed: {e}")
            return [FieldError(field=self.field, message=f"Validation of {self.field} could not be completed.")]

        elapsed_ms = int((time.time() - start) * 1000)
        if errors:
            logger.debug("%s reported %d error(s) in %dms", self.name, len(errors), elapsed_ms)
        return errors

    # ------------------------------------------------------------------
    # Support helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _entries(data: Dict[str, Any], key: str) -> List[Any]:
        value = data.get(key)
        return value if isinstance(value, list) else []

    @staticmethod
    def _error(field: str, message: str) -> FieldError:
        return FieldError(field=field, message=message)


class RuleFactory:
    """Factory to create validation rules by name."""

    RULE_NAMES = (
        "main_title",
        "title_type",
        "license",
        "author",
        "contributor",
        "abstract",
        "polygon",
        "temporal",
        "related_identifier",
    )

    @staticmethod
    def create(name: str) -> BaseRule:
        if name == "main_title":
            from rules.title_rules import MainTitleRule
            return MainTitleRule()
        elif name == "title_type":
            from rules.title_rules import TitleTypeRule
            return TitleTypeRule()
        elif name == "license":
            from rules.field_rules import LicenseRule
            return LicenseRule()
        elif name == "author":
            from rules.agent_rules import AuthorRule
            return AuthorRule()
        elif name == "contributor":
            from rules.agent_rules import ContributorRule
            return ContributorRule()
        elif name == "abstract":
            from rules.description_rules import AbstractRule
            return AbstractRule()
        elif name == "polygon":
            from rules.coverage_rules import PolygonRule
            return PolygonRule()
        elif name == "temporal":
            from rules.coverage_rules import TemporalRule
            return TemporalRule()
        elif name == "related_identifier":
            from rules.field_rules import RelatedIdentifierRule
            return RelatedIdentifierRule()
        else:
            raise ValueError(f"No rule found for name: {name}")

    @classmethod
    def create_all(cls) -> List[BaseRule]:
        return [cls.create(name) for name in cls.RULE_NAMES]
