"""
Flattens a stored resource into the query map the curation editor is opened with.

Scalar fields and most collections use bracket keys (``authors[0][lastName]``);
the collections named in JSON_ENCODED_COLLECTIONS travel as one JSON string each.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from services.curation.vocabularies import kebab_case, pascal_case
from .resource_types import ResourceTypeLookup, get_resource_type_lookup

logger = logging.getLogger(__name__)


MAIN_TITLE = "main-title"
ALTERNATIVE_TITLE = "alternative-title"

# query key -> resource attribute
JSON_ENCODED_COLLECTIONS = {
    "relatedWorks": "relatedIdentifiers",
    "fundingReferences": "fundingReferences",
    "mslLaboratories": "mslLaboratories",
}

COVERAGE_FIELDS = (
    "latMin", "latMax", "lonMin", "lonMax",
    "startDate", "endDate", "startTime", "endTime",
    "timezone", "description",
)

CONTROLLED_KEYWORD_FIELDS = ("id", "text", "path", "language", "scheme", "schemeURI")


# ----------------------------------------------------------------------
# Value helpers
# ----------------------------------------------------------------------

def _trimmed(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float) and math.isfinite(value):
        return max(0, int(value))
    if isinstance(value, str):
        match = re.match(r"^\s*([+-]?\d+)", value)
        if match:
            return max(0, int(match.group(1)))
    return 0


def _is_contact(value: Any) -> bool:
    return value is True or value == 1 or value in ("true", "1")


def _nested(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


# ----------------------------------------------------------------------
# Collection normalization
# ----------------------------------------------------------------------

def normalize_titles(titles: Any) -> List[Dict[str, str]]:
    """Drop empty titles, type untyped ones and put main titles first."""
    cleaned = []
    for entry in titles or []:
        text = _trimmed(_nested(entry, "title"))
        if not text:
            continue
        slug = _trimmed(_nested(_nested(entry, "title_type"), "slug")) or ""
        cleaned.append({"title": text, "titleType": kebab_case(slug)})

    if not cleaned:
        return []

    has_main = any(entry["titleType"] == MAIN_TITLE for entry in cleaned)
    resolved = []
    for entry in cleaned:
        if not entry["titleType"]:
            entry = {**entry, "titleType": ALTERNATIVE_TITLE if has_main else MAIN_TITLE}
            has_main = True
        resolved.append(entry)

    if not any(entry["titleType"] == MAIN_TITLE for entry in resolved):
        resolved[0] = {**resolved[0], "titleType": MAIN_TITLE}

    main = [entry for entry in resolved if entry["titleType"] == MAIN_TITLE]
    secondary = [entry for entry in resolved if entry["titleType"] != MAIN_TITLE]
    return main + secondary


def normalize_affiliations(affiliations: Any) -> List[Dict[str, Optional[str]]]:
    results = []
    seen = set()
    for affiliation in affiliations or []:
        if not isinstance(affiliation, dict):
            continue

        value = _first_string(affiliation, "value", "name")
        ror_id = _first_string(affiliation, "rorId", "ror_id", "identifier")
        if not value and not ror_id:
            continue

        final_value = value or ror_id
        key = f"{final_value}|{ror_id}"
        if key in seen:
            continue
        seen.add(key)
        results.append({"value": final_value, "rorId": ror_id or None})
    return results


def _first_string(source: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        if isinstance(source.get(key), str):
            return source[key].strip()
    return ""


def normalize_roles(roles: Any) -> List[str]:
    result: List[str] = []
    for role in roles or []:
        if isinstance(role, dict):
            role = role.get("name")
        name = _trimmed(role)
        if name and name not in result:
            result.append(name)
    return result


def normalize_agents(agents: Any, contributors: bool = False) -> List[Dict[str, Any]]:
    """Typed agents sorted by position."""
    normalized = []
    for agent in agents or []:
        if not isinstance(agent, dict):
            continue

        entry: Dict[str, Any] = {
            "type": "institution" if agent.get("type") == "institution" else "person",
            "position": _non_negative_int(agent.get("position")),
            "affiliations": normalize_affiliations(agent.get("affiliations")),
        }
        if contributors:
            entry["roles"] = normalize_roles(agent.get("roles"))

        if entry["type"] == "institution":
            entry["institutionName"] = _trimmed(agent.get("institutionName"))
            if not contributors:
                entry["rorId"] = _trimmed(agent.get("rorId"))
        else:
            entry["orcid"] = _trimmed(agent.get("orcid"))
            entry["firstName"] = _trimmed(agent.get("firstName"))
            entry["lastName"] = _trimmed(agent.get("lastName"))
            if not contributors:
                entry["email"] = _trimmed(agent.get("email"))
                entry["website"] = _trimmed(agent.get("website"))
                entry["isContact"] = _is_contact(agent.get("isContact"))
        normalized.append(entry)

    return sorted(normalized, key=lambda entry: entry["position"])


# ----------------------------------------------------------------------
# Builder
# ----------------------------------------------------------------------

def _put(query: Dict[str, str], key: str, value: Any) -> None:
    if value is None or isinstance(value, bool):
        return
    text = value.strip() if isinstance(value, str) else str(value)
    if text:
        query[key] = text


def _add_agent_keys(query: Dict[str, str], prefix: str, agent: Dict[str, Any]) -> None:
    query[f"{prefix}[type]"] = agent["type"]
    query[f"{prefix}[position]"] = str(agent["position"])

    for index, role in enumerate(agent.get("roles", [])):
        query[f"{prefix}[roles][{index}]"] = role

    if agent["type"] == "person":
        for field in ("orcid", "firstName", "lastName", "email", "website"):
            _put(query, f"{prefix}[{field}]", agent.get(field))
        if agent.get("isContact"):
            query[f"{prefix}[isContact]"] = "true"
    else:
        _put(query, f"{prefix}[institutionName]", agent.get("institutionName"))
        _put(query, f"{prefix}[rorId]", agent.get("rorId"))

    for index, affiliation in enumerate(agent["affiliations"]):
        affiliation_prefix = f"{prefix}[affiliations][{index}]"
        query[f"{affiliation_prefix}[value]"] = affiliation["value"]
        _put(query, f"{affiliation_prefix}[rorId]", affiliation["rorId"])


def build_curation_query_from_resource(
    resource: Dict[str, Any],
    lookup: Optional[ResourceTypeLookup] = None,
) -> Dict[str, str]:
    """Flat query map for opening a stored resource in the editor."""
    query: Dict[str, str] = {}

    resource_id = resource.get("id")
    if isinstance(resource_id, int) and not isinstance(resource_id, bool):
        query["resourceId"] = str(resource_id)

    _put(query, "doi", _trimmed(resource.get("doi")))

    year = resource.get("year")
    if isinstance(year, (int, float)) and not isinstance(year, bool) and math.isfinite(year):
        query["year"] = str(int(year)) if float(year).is_integer() else str(year)

    _put(query, "version", _trimmed(resource.get("version")))
    _put(query, "language", _trimmed(_nested(resource.get("language"), "code")))

    resource_type_name = _nested(resource.get("resource_type"), "name")
    if _trimmed(resource_type_name):
        lookup = lookup or get_resource_type_lookup()
        _put(query, "resourceType", lookup.resolve_id(resource_type_name))

    for index, title in enumerate(normalize_titles(resource.get("titles"))):
        query[f"titles[{index}][title]"] = title["title"]
        query[f"titles[{index}][titleType]"] = title["titleType"]

    licenses = [_trimmed(_nested(entry, "identifier")) for entry in resource.get("licenses") or []]
    for index, identifier in enumerate(license_id for license_id in licenses if license_id):
        query[f"licenses[{index}]"] = identifier

    for index, author in enumerate(normalize_agents(resource.get("authors"))):
        _add_agent_keys(query, f"authors[{index}]", author)

    for index, contributor in enumerate(normalize_agents(resource.get("contributors"), contributors=True)):
        _add_agent_keys(query, f"contributors[{index}]", contributor)

    descriptions = [
        entry for entry in resource.get("descriptions") or []
        if _trimmed(_nested(entry, "descriptionType")) and _trimmed(_nested(entry, "description"))
    ]
    for index, description in enumerate(descriptions):
        query[f"descriptions[{index}][type]"] = pascal_case(description["descriptionType"].strip())
        query[f"descriptions[{index}][description]"] = description["description"].strip()

    dates = [entry for entry in resource.get("dates") or [] if _trimmed(_nested(entry, "dateType"))]
    for index, date_entry in enumerate(dates):
        prefix = f"dates[{index}]"
        query[f"{prefix}[dateType]"] = date_entry["dateType"].strip()
        for field in ("startDate", "endDate", "dateInformation"):
            _put(query, f"{prefix}[{field}]", _trimmed(date_entry.get(field)))

    keywords = [_trimmed(keyword) for keyword in resource.get("freeKeywords") or []]
    for index, keyword in enumerate(keyword for keyword in keywords if keyword):
        query[f"freeKeywords[{index}]"] = keyword

    for index, keyword in enumerate(resource.get("controlledKeywords") or []):
        for field in CONTROLLED_KEYWORD_FIELDS:
            _put(query, f"gcmdKeywords[{index}][{field}]", _nested(keyword, field))

    for index, coverage in enumerate(resource.get("spatialTemporalCoverages") or []):
        for field in COVERAGE_FIELDS:
            _put(query, f"coverages[{index}][{field}]", _nested(coverage, field))

    for query_key, attribute in JSON_ENCODED_COLLECTIONS.items():
        entries = resource.get(attribute) or []
        if entries:
            query[query_key] = json.dumps(entries, separators=(",", ":"), ensure_ascii=False)

    logger.debug("Built curation query with %d keys", len(query))
    return query


# ----------------------------------------------------------------------
# Inverse
# ----------------------------------------------------------------------

KEY_SEGMENTS = re.compile(r"\[([^\]]*)\]")


def _listify(node: Any) -> Any:
    if isinstance(node, dict):
        converted = {key: _listify(value) for key, value in node.items()}
        if converted and all(key.isdigit() for key in converted):
            return [converted[key] for key in sorted(converted, key=int)]
        return converted
    return node


def parse_curation_query(query: Dict[str, str]) -> Dict[str, Any]:
    """Re-inflate a flat curation query into nested collections."""
    tree: Dict[str, Any] = {}

    for key, value in query.items():
        if key in JSON_ENCODED_COLLECTIONS:
            try:
                tree[key] = json.loads(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring malformed JSON in query key %s", key)
            continue

        head = key.split("[", 1)[0]
        segments = [head] + KEY_SEGMENTS.findall(key[len(head):])

        node = tree
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[segments[-1]] = value

    return _listify(tree)
