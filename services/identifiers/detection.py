"""
Identifier classification.

The core classifier sorts a raw string into DOI, Handle, URL or Other.
The related-identifier detector refines that into the DataCite PID
vocabulary used by related works.
"""

import re
from typing import List, Tuple
from urllib.parse import urlparse

from config.models import IdentifierKind, IdentifierType


DOI_URL_PREFIX = re.compile(r"^https?://(?:dx\.)?doi\.org/", re.IGNORECASE)
DOI_SCHEME_PREFIX = re.compile(r"^doi:", re.IGNORECASE)
DOI_BARE = re.compile(r"^10\.\d{4,9}/\S.*$")

HANDLE_URL_PREFIX = re.compile(r"^https?://hdl\.handle\.net/", re.IGNORECASE)
HANDLE_BARE = re.compile(r"^\d+(?:\.\w+)?/\S+$")

# "10.5880 with spaces" is a DOI prefix followed by prose, never a DOI
DOI_PREFIX_WITH_PROSE = re.compile(r"^10\.\d+\s+\S")


# ----------------------------------------------------------------------
# CORE CLASSIFIER
# ----------------------------------------------------------------------

def _strip_doi_prefix(value: str) -> str:
    value = DOI_URL_PREFIX.sub("", value, count=1)
    return DOI_SCHEME_PREFIX.sub("", value, count=1).strip()


def _is_doi(value: str) -> bool:
    if DOI_URL_PREFIX.match(value) or DOI_SCHEME_PREFIX.match(value):
        return bool(DOI_BARE.match(_strip_doi_prefix(value)))
    return bool(DOI_BARE.match(value))


def _is_handle(value: str) -> bool:
    if HANDLE_URL_PREFIX.match(value):
        return bool(HANDLE_BARE.match(HANDLE_URL_PREFIX.sub("", value, count=1)))
    return bool(HANDLE_BARE.match(value))


def _is_url(value: str) -> bool:
    if any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)


def detect_identifier_type(raw: str) -> IdentifierKind:
    """Classify a raw identifier as DOI, Handle, URL or Other."""
    value = (raw or "").strip()
    if not value:
        return IdentifierKind.OTHER

    if _is_doi(value):
        return IdentifierKind.DOI
    if _is_handle(value):
        return IdentifierKind.HANDLE
    if _is_url(value):
        return IdentifierKind.URL
    return IdentifierKind.OTHER


def normalize_identifier(raw: str, kind) -> str:
    """Return the canonical bare form; only DOIs are rewritten."""
    if raw is None:
        return raw
    if IdentifierKind(kind) is IdentifierKind.DOI:
        return _strip_doi_prefix(raw.strip())
    return raw


# ----------------------------------------------------------------------
# RELATED IDENTIFIER DETECTION
# ----------------------------------------------------------------------

IGSN_DOI_PREFIXES = r"(?:60516|58052|60510|58108|58095)"

_RELATED_PATTERNS: List[Tuple[re.Pattern, IdentifierType]] = [
    # IGSN shares DOI syntax for several registration agencies
    (re.compile(rf"^https?://(?:dx\.)?doi\.org/10\.{IGSN_DOI_PREFIXES}/\S+", re.I), IdentifierType.IGSN),
    (re.compile(r"^https?://igsn\.org/10\.273/\S+", re.I), IdentifierType.IGSN),
    (re.compile(rf"^10\.{IGSN_DOI_PREFIXES}/\S+$"), IdentifierType.IGSN),
    (re.compile(r"^10\.273/\S+$"), IdentifierType.IGSN),
    (re.compile(r"^igsn:?\s*[A-Za-z0-9]+$", re.I), IdentifierType.IGSN),
    (re.compile(r"^urn:igsn:[A-Za-z0-9]+$", re.I), IdentifierType.IGSN),
    # WDCC registers 10.1594 as a Handle prefix
    (re.compile(r"^10\.1594/\S+$"), IdentifierType.HANDLE),
    (DOI_URL_PREFIX, IdentifierType.DOI),
    (DOI_SCHEME_PREFIX, IdentifierType.DOI),
    (re.compile(r"^10\.\d{4,}"), IdentifierType.DOI),
    (re.compile(r"^https?://arxiv\.org/(?:abs|pdf|html|src)/\S+", re.I), IdentifierType.ARXIV),
    (re.compile(r"^arxiv:", re.I), IdentifierType.ARXIV),
    (re.compile(r"^\d{4}\.\d{4,5}(v\d+)?$"), IdentifierType.ARXIV),
    (re.compile(r"^[a-z-]+/\d{7}$", re.I), IdentifierType.ARXIV),
    (re.compile(r"^https?://(?:ui\.)?adsabs\.harvard\.edu/abs/\S+", re.I), IdentifierType.BIBCODE),
    (re.compile(r"^\d{4}[A-Za-z&.]{5}[A-Za-z0-9.]{4}[A-Za-z.][A-Za-z0-9.]{4}[A-Za-z]$"), IdentifierType.BIBCODE),
    (re.compile(r"^https?://(?:identifiers\.org|bioregistry\.io)/cstr:", re.I), IdentifierType.CSTR),
    (re.compile(r"^cstr:\d{5}\.\d{2}\.\S+", re.I), IdentifierType.CSTR),
    (re.compile(r"^https?://(?:isbn|books)\.openedition\.org/(?:isbn/)?97[89]", re.I), IdentifierType.ISBN),
    (re.compile(r"^urn:isbn:", re.I), IdentifierType.ISBN),
    (re.compile(r"^isbn(?:-?(?:13|10))?[:\s]+", re.I), IdentifierType.ISBN),
]

_LATE_PATTERNS: List[Tuple[re.Pattern, IdentifierType]] = [
    (re.compile(r"^urn:(?:ean13|gtin(?:-13)?):[\d-]+$", re.I), IdentifierType.EAN13),
    (re.compile(r"^urn:lsid:[a-z0-9.-]+:[a-z0-9._-]+:[a-z0-9._-]+(?::\d+)?$", re.I), IdentifierType.LSID),
    (re.compile(r"^https?://pubmed\.ncbi\.nlm\.nih\.gov/\d{1,9}$", re.I), IdentifierType.PMID),
    (re.compile(r"^https?://(?:www\.)?ncbi\.nlm\.nih\.gov/pubmed/\d{1,9}$", re.I), IdentifierType.PMID),
    (re.compile(r"^(?:pmid|pubmed\s*id):?\s*\d{1,9}$", re.I), IdentifierType.PMID),
    (re.compile(r"^https?://w3id\.org/[a-z0-9._/-]+(?:#[a-z0-9._-]*)?$", re.I), IdentifierType.W3ID),
    (re.compile(r"^https?://purl\.(?:oclc\.)?org/[a-z0-9._/-]+$", re.I), IdentifierType.PURL),
    (re.compile(r"^https?://purl\.[a-z0-9.-]+\.(?:org|edu)/[a-z0-9._/-]+$", re.I), IdentifierType.PURL),
    (re.compile(r"^rrid:?\s*[a-z]+[_:]?[a-z0-9_:-]+$", re.I), IdentifierType.RRID),
    (re.compile(r"^(?:lissn|issn-l):?\s*\d{4}-?\d{3}[\dXx]$", re.I), IdentifierType.LISSN),
    (re.compile(r"^urn:issn:\d{4}-?\d{3}[\dXx]$", re.I), IdentifierType.EISSN),
    (re.compile(r"^(?:e-?issn|p-?issn|issn):?\s*\d{4}-?\d{3}[\dXx]$", re.I), IdentifierType.EISSN),
    (re.compile(r"^\d{4}-\d{3}[\dXx]$"), IdentifierType.EISSN),
    (re.compile(r"^urn:istc:[0-9A-Ja-j-]+$", re.I), IdentifierType.ISTC),
    (re.compile(r"^https?://[^/]+(?:/[^/]+)*/ark:/?\d{5,}/\S+", re.I), IdentifierType.ARK),
    (re.compile(r"^ark:/?\d{5,}/\S+", re.I), IdentifierType.ARK),
    (re.compile(r"^https?://hdl\.handle\.net/(?:api/handles/)?\S+", re.I), IdentifierType.HANDLE),
    (re.compile(r"^hdl://\S+", re.I), IdentifierType.HANDLE),
    (re.compile(r"^urn:handle:\S+", re.I), IdentifierType.HANDLE),
    (re.compile(r"^https?://nbn-resolving\.(?:de|org)/urn:\S+$", re.I), IdentifierType.URN),
    (re.compile(r"^https?://urn\.fi/urn:\S+$", re.I), IdentifierType.URN),
    (re.compile(r"^urn:(?!isbn:|lsid:|igsn:|issn:|istc:|handle:)[a-z0-9][a-z0-9-]{0,31}:\S+$", re.I), IdentifierType.URN),
]


def _digits_only(value: str) -> str:
    return re.sub(r"[-\s]", "", value)


def detect_related_identifier_type(raw: str) -> IdentifierType:
    """Guess the DataCite identifier type of a related work."""
    value = (raw or "").strip()

    if DOI_PREFIX_WITH_PROSE.match(value):
        return IdentifierType.URL

    for pattern, identifier_type in _RELATED_PATTERNS:
        if pattern.match(value):
            return identifier_type

    compact = _digits_only(value)
    if re.match(r"^97[89]\d{10}$", compact) or re.match(r"^\d{9}[\dXx]$", compact):
        return IdentifierType.ISBN
    if re.match(r"^\d{13}$", compact):
        return IdentifierType.EAN13

    for pattern, identifier_type in _LATE_PATTERNS:
        if pattern.match(value):
            return identifier_type

    if re.match(r"^\d{7}[\dXx]$", value):
        return IdentifierType.EISSN

    kind = detect_identifier_type(value)
    if kind is IdentifierKind.URL:
        return IdentifierType.URL
    if kind is IdentifierKind.HANDLE:
        return IdentifierType.HANDLE
    if kind is IdentifierKind.DOI:
        return IdentifierType.DOI

    # Slash-separated strings without spaces are most often unprefixed DOIs
    if "/" in value and " " not in value:
        return IdentifierType.DOI
    return IdentifierType.URL
