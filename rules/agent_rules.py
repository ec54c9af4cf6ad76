"""Rules for authors and contributors."""

from typing import Any, Dict, List

from config.models import AgentType, FieldError
from .base import BaseRule, RuleContext


class AuthorRule(BaseRule):
    """Authors need a name matching their type; contacts need an email."""

    name = "author"
    field = "authors"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        authors = self._entries(data, "authors")
        if not authors:
            return [self._error("authors", "At least one author must be provided.")]

        errors = []
        for index, author in enumerate(authors):
            if not isinstance(author, dict):
                errors.append(self._error(f"authors.{index}", "Each author entry must be an object."))
                continue

            if author.get("type", AgentType.PERSON.value) == AgentType.PERSON.value:
                if not author.get("lastName"):
                    errors.append(self._error(
                        f"authors.{index}.lastName",
                        "A last name is required for person authors.",
                    ))
                if author.get("isContact") and not author.get("email"):
                    errors.append(self._error(
                        f"authors.{index}.email",
                        "A contact email is required when marking an author as the contact person.",
                    ))
                continue

            if not author.get("institutionName"):
                errors.append(self._error(
                    f"authors.{index}.institutionName",
                    "An institution name is required for institution authors.",
                ))

        return errors


class ContributorRule(BaseRule):
    """Contributors need a name matching their type and at least one role."""

    name = "contributor"
    field = "contributors"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        errors = []
        for index, contributor in enumerate(self._entries(data, "contributors")):
            if not isinstance(contributor, dict):
                errors.append(self._error(f"contributors.{index}", "Each contributor entry must be an object."))
                continue

            if contributor.get("type", AgentType.PERSON.value) == AgentType.PERSON.value:
                if not contributor.get("lastName"):
                    errors.append(self._error(
                        f"contributors.{index}.lastName",
                        "A last name is required for person contributors.",
                    ))
            elif not contributor.get("institutionName"):
                errors.append(self._error(
                    f"contributors.{index}.institutionName",
                    "An institution name is required for institution contributors.",
                ))

            roles = contributor.get("roles")
            if not isinstance(roles, list) or not roles:
                errors.append(self._error(
                    f"contributors.{index}.roles",
                    "At least one role must be provided for each contributor.",
                ))

        return errors
