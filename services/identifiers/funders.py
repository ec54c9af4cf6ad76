"""Funder identifier scheme detection."""

import re
from typing import Optional

from config.models import FunderIdentifierType


ROR_PATTERN = re.compile(r"^(?:https?://)?(?:www\.)?ror\.org/\S+$", re.IGNORECASE)
CROSSREF_PATTERN = re.compile(r"^(?:(?:https?://)?(?:dx\.)?doi\.org/)?10\.13039/\S+$", re.IGNORECASE)
ISNI_URL_PATTERN = re.compile(r"^(?:https?://)?(?:www\.)?isni\.org/isni/[\d\s-]{15,}[\dX]$", re.IGNORECASE)
ISNI_BARE_PATTERN = re.compile(r"^\d{15}[\dX]$", re.IGNORECASE)
GRID_PATTERN = re.compile(r"^(?:https?://)?(?:www\.)?grid\.ac/institutes/grid\.\S+$", re.IGNORECASE)


def detect_funder_identifier_type(raw: Optional[str]) -> Optional[FunderIdentifierType]:
    """Return the identifier scheme of a funder identifier, None when empty."""
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None

    if ROR_PATTERN.match(value):
        return FunderIdentifierType.ROR
    if CROSSREF_PATTERN.match(value):
        return FunderIdentifierType.CROSSREF
    if ISNI_URL_PATTERN.match(value):
        return FunderIdentifierType.ISNI
    if ISNI_BARE_PATTERN.match(re.sub(r"[\s-]", "", value)):
        return FunderIdentifierType.ISNI
    if GRID_PATTERN.match(value):
        return FunderIdentifierType.GRID
    return FunderIdentifierType.OTHER
