"""Metadata normalization for submitted resources."""

import logging
from typing import Any, Dict, List, Optional

from config.models import (
    AgentType,
    CoverageType,
    DroppedEntry,
    NormalizationResult,
)
from services.identifiers import detect_funder_identifier_type, detect_related_identifier_type
from .vocabularies import TitleTypeLookup, kebab_case

logger = logging.getLogger(__name__)


TRUTHY_FLAGS = {"true", "1", "yes", "on"}


# ----------------------------------------------------------------------
# Scalar helpers
# ----------------------------------------------------------------------

def normalize_string(value: Any) -> Optional[str]:
    """Trim strings and numbers; anything else or an empty result is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        trimmed = str(value).strip()
        return trimmed or None
    return None


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_FLAGS
    return False


def to_int(value: Any) -> Any:
    """Integer when the value is numeric, None when blank, otherwise unchanged."""
    if value is None or isinstance(value, bool):
        return None if value is None else value
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return text
    return value


def to_float(value: Any) -> Any:
    """Float for numeric input, None when blank, otherwise the raw value."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return text
    return value


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, dict):
        # form-encoded payloads arrive as {"0": {...}, "1": {...}}
        return list(value.values())
    return []


# ----------------------------------------------------------------------
# Normalizer
# ----------------------------------------------------------------------

class MetadataNormalizer:
    """Turns a raw editor payload into the canonical submission shape."""

    def __init__(self, title_types: Optional[TitleTypeLookup] = None):
        self.title_types = title_types or TitleTypeLookup()
        self._dropped: List[DroppedEntry] = []

    def normalize(self, payload: Dict[str, Any]) -> NormalizationResult:
        """Normalize every collection and scalar of a submission."""
        if not isinstance(payload, dict):
            raise ValueError("Submission payload must be a mapping")

        self._dropped = []
        data = {
            "resourceId": to_int(payload.get("resourceId")),
            "doi": normalize_string(payload.get("doi")),
            "year": to_int(payload.get("year")),
            "resourceType": to_int(payload.get("resourceType")),
            "version": normalize_string(payload.get("version")),
            "language": normalize_string(payload.get("language")),
            "titles": self._normalize_titles(payload.get("titles")),
            "licenses": self._normalize_licenses(payload.get("licenses")),
            "authors": self._normalize_agents(payload.get("authors"), "authors"),
            "contributors": self._normalize_agents(payload.get("contributors"), "contributors"),
            "descriptions": self._normalize_descriptions(payload.get("descriptions")),
            "dates": self._normalize_dates(payload.get("dates")),
            "freeKeywords": self._normalize_free_keywords(payload.get("freeKeywords")),
            "gcmdKeywords": self._normalize_controlled_keywords(payload.get("gcmdKeywords")),
            "spatialTemporalCoverages": self._normalize_coverages(payload.get("spatialTemporalCoverages")),
            "relatedIdentifiers": self._normalize_related_identifiers(payload.get("relatedIdentifiers")),
            "fundingReferences": self._normalize_funding_references(payload.get("fundingReferences")),
            "mslLaboratories": self._normalize_laboratories(payload.get("mslLaboratories")),
        }

        if self._dropped:
            logger.info("Normalization dropped %d entries", len(self._dropped))
        return NormalizationResult(data=data, dropped=list(self._dropped))

    def _drop(self, collection: str, index: int, reason: str) -> None:
        logger.warning(f"Dropped {collection}[{index}]: {reason}")
        self._dropped.append(DroppedEntry(collection=collection, index=index, reason=reason))

    # ------------------------------------------------------------------
    # Titles and licenses
    # ------------------------------------------------------------------
    def _normalize_titles(self, raw: Any) -> List[Dict[str, Any]]:
        titles = []
        for entry in _as_list(raw):
            if not isinstance(entry, dict):
                entry = {}
            title = entry.get("title")
            title_type = entry.get("titleType")
            titles.append({
                "title": normalize_string(title),
                "titleType": self.title_types.resolve(str(title_type)) if title_type is not None else None,
            })
        return titles

    def _normalize_licenses(self, raw: Any) -> List[str]:
        licenses: List[str] = []
        for license_id in _as_list(raw):
            value = normalize_string(license_id)
            if value is None or value in licenses:
                continue
            licenses.append(value)
        return licenses

    # ------------------------------------------------------------------
    # Authors and contributors
    # ------------------------------------------------------------------
    def _normalize_affiliations(self, raw: Any) -> List[Dict[str, Optional[str]]]:
        affiliations = []
        seen = set()

        for affiliation in _as_list(raw):
            if isinstance(affiliation, str):
                value, ror_id = affiliation.strip(), None
            elif isinstance(affiliation, dict):
                value = normalize_string(affiliation.get("value")) or ""
                ror_id = normalize_string(affiliation.get("rorId"))
                if not value and not ror_id:
                    continue
                value = value or ror_id
            else:
                continue

            if not value:
                continue
            key = f"{value}|{ror_id or ''}"
            if key in seen:
                continue
            seen.add(key)
            affiliations.append({"value": value, "rorId": ror_id})

        return affiliations

    def _normalize_roles(self, raw: Any) -> List[str]:
        roles = []
        for role in _as_list(raw):
            if isinstance(role, dict):
                role = role.get("name")
            value = normalize_string(role)
            if value:
                roles.append(value)
        return roles

    def _normalize_agents(self, raw: Any, collection: str) -> List[Dict[str, Any]]:
        agents = []
        is_contributor = collection == "contributors"

        for index, agent in enumerate(_as_list(raw)):
            if not isinstance(agent, dict):
                self._drop(collection, index, "entry is not an object")
                continue

            type_candidate = normalize_string(agent.get("type"))
            agent_type = type_candidate if type_candidate in (AgentType.PERSON.value, AgentType.INSTITUTION.value) \
                else AgentType.PERSON.value
            affiliations = self._normalize_affiliations(agent.get("affiliations"))

            if agent_type == AgentType.INSTITUTION.value:
                normalized = {
                    "type": agent_type,
                    "institutionName": normalize_string(agent.get("institutionName")),
                }
                if not is_contributor:
                    normalized["rorId"] = normalize_string(agent.get("rorId"))
            else:
                normalized = {
                    "type": agent_type,
                    "orcid": normalize_string(agent.get("orcid")),
                    "firstName": normalize_string(agent.get("firstName")),
                    "lastName": normalize_string(agent.get("lastName")),
                }
                if not is_contributor:
                    is_contact = is_truthy(agent.get("isContact", False))
                    normalized["email"] = normalize_string(agent.get("email")) if is_contact else None
                    normalized["website"] = normalize_string(agent.get("website")) if is_contact else None
                    normalized["isContact"] = is_contact

            if is_contributor:
                normalized["roles"] = self._normalize_roles(agent.get("roles"))
            normalized["affiliations"] = affiliations
            normalized["position"] = index
            agents.append(normalized)

        return agents

    # ------------------------------------------------------------------
    # Descriptions and dates
    # ------------------------------------------------------------------
    def _normalize_descriptions(self, raw: Any) -> List[Dict[str, str]]:
        descriptions = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, dict):
                self._drop("descriptions", index, "entry is not an object")
                continue

            description_type = normalize_string(entry.get("descriptionType"))
            text = normalize_string(entry.get("description"))
            if not description_type or not text:
                self._drop("descriptions", index, "description type or text is empty")
                continue

            descriptions.append({"descriptionType": kebab_case(description_type), "description": text})
        return descriptions

    def _normalize_dates(self, raw: Any) -> List[Dict[str, Optional[str]]]:
        dates = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, dict):
                self._drop("dates", index, "entry is not an object")
                continue

            date_type = normalize_string(entry.get("dateType"))
            if not date_type:
                self._drop("dates", index, "date type is empty")
                continue

            dates.append({
                "dateType": kebab_case(date_type),
                "startDate": normalize_string(entry.get("startDate")),
                "endDate": normalize_string(entry.get("endDate")),
                "dateInformation": normalize_string(entry.get("dateInformation")),
            })
        return dates

    # ------------------------------------------------------------------
    # Keywords
    # ------------------------------------------------------------------
    def _normalize_free_keywords(self, raw: Any) -> List[str]:
        keywords: List[str] = []
        for keyword in _as_list(raw):
            value = normalize_string(keyword)
            if value and value not in keywords:
                keywords.append(value)
        return keywords

    def _normalize_controlled_keywords(self, raw: Any) -> List[Dict[str, Any]]:
        keywords = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, dict):
                self._drop("gcmdKeywords", index, "entry is not an object")
                continue

            keyword = {
                "id": normalize_string(entry.get("id")),
                "text": normalize_string(entry.get("text")),
                "path": normalize_string(entry.get("path")),
                "language": normalize_string(entry.get("language")),
                "scheme": normalize_string(entry.get("scheme")),
                "schemeURI": normalize_string(entry.get("schemeURI")),
                "vocabularyType": normalize_string(entry.get("vocabularyType")),
            }
            if not (keyword["id"] and keyword["text"] and keyword["scheme"]):
                self._drop("gcmdKeywords", index, "keyword id, text or scheme is empty")
                continue
            keywords.append(keyword)
        return keywords

    # ------------------------------------------------------------------
    # Spatial and temporal coverage
    # ------------------------------------------------------------------
    def _normalize_polygon_points(self, raw: Any, coverage_index: int) -> List[Dict[str, float]]:
        points = []
        collection = f"spatialTemporalCoverages.{coverage_index}.polygonPoints"

        for index, point in enumerate(_as_list(raw)):
            if not isinstance(point, dict):
                self._drop(collection, index, f"Point {index + 1}: not a valid coordinate pair")
                continue

            latitude = to_float(point.get("latitude", point.get("lat")))
            longitude = to_float(point.get("longitude", point.get("lon")))
            if not isinstance(latitude, float) or not isinstance(longitude, float):
                self._drop(collection, index, f"Point {index + 1}: missing or non-numeric coordinates")
                continue
            if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
                self._drop(
                    collection, index,
                    "Point %d: coordinates out of range (lat: %.6f, lon: %.6f)" % (index + 1, latitude, longitude),
                )
                continue

            points.append({"latitude": latitude, "longitude": longitude})
        return points

    def _normalize_coverages(self, raw: Any) -> List[Dict[str, Any]]:
        coverages = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, dict):
                self._drop("spatialTemporalCoverages", index, "entry is not an object")
                continue

            type_candidate = (normalize_string(entry.get("type")) or "").lower()
            coverage_type = type_candidate if type_candidate in {t.value for t in CoverageType} \
                else CoverageType.POINT.value

            lat_min = to_float(entry.get("latMin"))
            lon_min = to_float(entry.get("lonMin"))
            raw_points = _as_list(entry.get("polygonPoints"))
            description = normalize_string(entry.get("description"))

            if lat_min is None and lon_min is None and not raw_points and not description:
                self._drop("spatialTemporalCoverages", index, "coverage has no coordinates or description")
                continue

            position = len(coverages)
            coverages.append({
                "type": coverage_type,
                "latMin": lat_min,
                "latMax": to_float(entry.get("latMax")),
                "lonMin": lon_min,
                "lonMax": to_float(entry.get("lonMax")),
                "polygonPoints": self._normalize_polygon_points(raw_points, position)
                if coverage_type == CoverageType.POLYGON.value else [],
                "startDate": normalize_string(entry.get("startDate")),
                "endDate": normalize_string(entry.get("endDate")),
                "startTime": normalize_string(entry.get("startTime")),
                "endTime": normalize_string(entry.get("endTime")),
                "timezone": normalize_string(entry.get("timezone")),
                "description": description,
            })
        return coverages

    # ------------------------------------------------------------------
    # Related works, funding, laboratories
    # ------------------------------------------------------------------
    def _normalize_related_identifiers(self, raw: Any) -> List[Dict[str, Any]]:
        related = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, dict):
                self._drop("relatedIdentifiers", index, "entry is not an object")
                continue

            identifier = normalize_string(entry.get("identifier"))
            if not identifier:
                self._drop("relatedIdentifiers", index, "identifier is empty")
                continue

            identifier_type = normalize_string(entry.get("identifierType"))
            if not identifier_type:
                identifier_type = detect_related_identifier_type(identifier).value
                logger.debug("Detected identifier type %s for %s", identifier_type, identifier)

            related.append({
                "identifier": identifier,
                "identifierType": identifier_type,
                "relationType": normalize_string(entry.get("relationType")),
                "position": index,
            })
        return related

    def _normalize_funding_references(self, raw: Any) -> List[Dict[str, Any]]:
        references = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, dict):
                self._drop("fundingReferences", index, "entry is not an object")
                continue

            funder_name = normalize_string(entry.get("funderName"))
            if not funder_name:
                self._drop("fundingReferences", index, "funder name is empty")
                continue

            funder_identifier = normalize_string(entry.get("funderIdentifier"))
            identifier_type = normalize_string(entry.get("funderIdentifierType"))
            if funder_identifier and not identifier_type:
                detected = detect_funder_identifier_type(funder_identifier)
                identifier_type = detected.value if detected else None

            references.append({
                "funderName": funder_name,
                "funderIdentifier": funder_identifier,
                "funderIdentifierType": identifier_type if funder_identifier else None,
                "awardNumber": normalize_string(entry.get("awardNumber")),
                "awardUri": normalize_string(entry.get("awardUri")),
                "awardTitle": normalize_string(entry.get("awardTitle")),
                "position": index,
            })
        return references

    def _normalize_laboratories(self, raw: Any) -> List[Dict[str, Optional[str]]]:
        laboratories = []
        seen = set()
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, dict):
                self._drop("mslLaboratories", index, "entry is not an object")
                continue

            identifier = normalize_string(entry.get("identifier"))
            name = normalize_string(entry.get("name"))
            if not identifier or not name:
                self._drop("mslLaboratories", index, "laboratory identifier or name is empty")
                continue
            if identifier in seen:
                continue
            seen.add(identifier)

            laboratories.append({
                "identifier": identifier,
                "name": name,
                "affiliation_name": normalize_string(entry.get("affiliation_name")),
                "affiliation_ror": normalize_string(entry.get("affiliation_ror")),
            })
        return laboratories


def normalize_submission(payload: Dict[str, Any], title_types: Optional[TitleTypeLookup] = None) -> NormalizationResult:
    """Convenience wrapper around MetadataNormalizer."""
    return MetadataNormalizer(title_types).normalize(payload)
