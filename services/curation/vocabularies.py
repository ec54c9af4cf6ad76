"""Controlled vocabulary helpers shared by the normalizer and validator."""

import logging
import re
from typing import Dict, Iterable, List, Optional

from config.models import TitleTypeReference, TitleTypeSlug

logger = logging.getLogger(__name__)


DEFAULT_TITLE_TYPES: List[TitleTypeReference] = [
    TitleTypeReference(id=1, name="Main Title", slug="MainTitle"),
    TitleTypeReference(id=2, name="Alternative Title", slug="AlternativeTitle"),
    TitleTypeReference(id=3, name="Subtitle", slug="Subtitle"),
    TitleTypeReference(id=4, name="Translated Title", slug="TranslatedTitle"),
    TitleTypeReference(id=5, name="Other", slug="Other"),
]


def kebab_case(value: Optional[str]) -> str:
    """'MainTitle', 'Main Title' and 'main_title' all become 'main-title'."""
    if value is None:
        return ""
    text = str(value).strip()
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", text)
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", text)
    text = re.sub(r"[^A-Za-z0-9]+", "-", text)
    return text.strip("-").lower()


def pascal_case(value: Optional[str]) -> str:
    """'series-information' becomes 'SeriesInformation'."""
    if not value:
        return ""
    return "".join(part[:1].upper() + part[1:] for part in kebab_case(value).split("-") if part)


def is_main_title(title_type) -> bool:
    """True for 'MainTitle', 'main-title' and {'slug': ...} variants."""
    if isinstance(title_type, dict):
        title_type = title_type.get("slug") or title_type.get("name")
    return kebab_case(title_type) == TitleTypeSlug.MAIN_TITLE.value


class TitleTypeLookup:
    """Maps kebab-case title types to the slugs that are actually stored."""

    def __init__(self, records: Optional[Iterable[TitleTypeReference]] = None):
        self._by_kebab: Dict[str, str] = {}
        for record in records if records is not None else DEFAULT_TITLE_TYPES:
            if isinstance(record, dict):
                record = TitleTypeReference(**record)
            self._by_kebab.setdefault(kebab_case(record.slug), record.slug)
        logger.debug("Title type lookup built with %d entries", len(self._by_kebab))

    @property
    def slugs(self) -> List[str]:
        return list(self._by_kebab.values())

    def resolve(self, raw: Optional[str]) -> Optional[str]:
        """Stored slug for a submitted title type, kebab form when unknown."""
        key = kebab_case(raw)
        if not key:
            return None
        return self._by_kebab.get(key, key)

    def is_known(self, slug: Optional[str]) -> bool:
        return kebab_case(slug) in self._by_kebab
