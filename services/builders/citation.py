"""DataCite-style citation strings for landing pages."""

import logging
from typing import Any, Dict, List, Optional

from config.models import IdentifierKind
from services.curation.vocabularies import is_main_title
from services.identifiers import normalize_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CREATOR = "Unknown Creator"
UNTITLED = "Untitled"
NO_YEAR = "n.d."
NO_DOI = "DOI not available"
DOI_RESOLVER = "https://doi.org/"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _format_person(given: str, family: str) -> str:
    if family and given:
        return f"{family}, {given}"
    return family or given


def read_creator_name(creator: Any) -> str:
    """
    Display name of one creator.

    Current records nest the person or institution under ``creatorable``;
    older records carry the name fields on the creator itself.
    """
    if not isinstance(creator, dict):
        return ""

    nested = creator.get("creatorable")
    if isinstance(nested, dict):
        creator_type = _text(nested.get("type") or creator.get("creatorable_type")).lower()
        if "institution" in creator_type:
            return _text(nested.get("name"))
        name = _format_person(_text(nested.get("given_name")), _text(nested.get("family_name")))
        return name or _text(nested.get("name"))

    name = _format_person(_text(creator.get("given_name")), _text(creator.get("family_name")))
    if name:
        return name
    name = _format_person(_text(creator.get("first_name")), _text(creator.get("last_name")))
    if name:
        return name
    return _text(creator.get("institution_name")) or _text(creator.get("name"))


def format_creators(creators: Any) -> str:
    names: List[str] = [read_creator_name(creator) for creator in creators or []]
    names = [name for name in names if name]
    return "; ".join(names) if names else UNKNOWN_CREATOR


def select_title(titles: Any) -> str:
    entries = [t for t in titles or [] if isinstance(t, dict) and _text(t.get("title"))]
    for entry in entries:
        if is_main_title(entry.get("title_type")):
            return _text(entry["title"])
    return _text(entries[0]["title"]) if entries else UNTITLED


def select_year(resource: Dict[str, Any]) -> str:
    for key in ("year", "publication_year"):
        value = _text(resource.get(key))
        if value:
            return value
    return NO_YEAR


def _publisher(resource: Dict[str, Any]) -> str:
    publisher = resource.get("publisher")
    if isinstance(publisher, dict):
        publisher = publisher.get("name")
    return _text(publisher)


def build_citation(
    resource: Dict[str, Any],
    default_publisher: Optional[str] = None,
    resolver_base: Optional[str] = None,
) -> str:
    """'<Creators> (<Year>): <Title>. <Publisher>. <DOI URL>'"""
    creators = format_creators(resource.get("creators"))
    year = select_year(resource)
    title = select_title(resource.get("titles"))
    publisher = _publisher(resource) or _text(default_publisher)
    doi = normalize_identifier(_text(resource.get("doi")), IdentifierKind.DOI)
    resolver = _text(resolver_base) or DOI_RESOLVER
    if not resolver.endswith("/"):
        resolver += "/"

    parts = [f"{creators} ({year}): {title}."]
    if publisher:
        parts.append(f"{publisher}.")
    parts.append(f"{resolver}{doi}" if doi else NO_DOI)

    citation = " ".join(parts)
    logger.debug("Built citation: %s", citation)
    return citation
