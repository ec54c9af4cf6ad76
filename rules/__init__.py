"""Cross-field validation rules."""

from .base import BaseRule, RuleContext, RuleFactory
from .title_rules import MainTitleRule, TitleTypeRule
from .agent_rules import AuthorRule, ContributorRule
from .description_rules import AbstractRule
from .coverage_rules import PolygonRule, TemporalRule
from .field_rules import LicenseRule, RelatedIdentifierRule

__all__ = [
    "BaseRule",
    "RuleContext",
    "RuleFactory",
    "MainTitleRule",
    "TitleTypeRule",
    "AuthorRule",
    "ContributorRule",
    "AbstractRule",
    "PolygonRule",
    "TemporalRule",
    "LicenseRule",
    "RelatedIdentifierRule",
]
