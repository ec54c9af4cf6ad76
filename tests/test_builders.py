import json
import threading

import pytest
import requests

from services.builders import (
    ResourceTypeLookup,
    build_citation,
    build_curation_query_from_resource,
    build_date_time,
    get_resource_type_lookup,
    parse_curation_query,
    parse_date_entry,
    parse_date_time,
    read_creator_name,
    reset_resource_type_lookup,
    serialize_date_entry,
)
from conftest import DummyResponse


RESOURCE_TYPES = [
    {"id": 1, "name": "Dataset", "slug": "dataset"},
    {"id": 3, "name": "Physical Object", "slug": "physical-object"},
]


class FakeLookup:
    def __init__(self, mapping):
        self.mapping = mapping

    def resolve_id(self, name):
        return self.mapping.get(name)


# ----------------------------------------------------------------------
# Resource type lookup
# ----------------------------------------------------------------------

def _counting_get(monkeypatch, response):
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(requests, "get", fake_get)
    return calls


def test_lookup_caches_within_ttl(monkeypatch):
    calls = _counting_get(monkeypatch, DummyResponse(payload=RESOURCE_TYPES))
    lookup = ResourceTypeLookup(url="http://api.test/resource-types", ttl=300, timeout=1.5)

    assert lookup.resolve_id(" dataset ") == "1"
    assert lookup.resolve_id("Physical Object") == "3"
    assert lookup.resolve_id("Software") is None
    assert calls == [("http://api.test/resource-types", 1.5)]

    lookup.reset()
    lookup.get_all()
    assert len(calls) == 2


def test_lookup_refetches_after_expiry(monkeypatch):
    calls = _counting_get(monkeypatch, DummyResponse(payload=RESOURCE_TYPES))
    lookup = ResourceTypeLookup(url="http://api.test", ttl=0)

    lookup.get_all()
    lookup.get_all()
    assert len(calls) == 2


def test_lookup_failures_are_not_cached(monkeypatch):
    calls = _counting_get(monkeypatch, requests.ConnectionError("down"))
    lookup = ResourceTypeLookup(url="http://api.test", ttl=300)

    assert lookup.get_all() == []
    assert lookup.resolve_id("Dataset") is None
    assert len(calls) == 2

    _counting_get(monkeypatch, DummyResponse(status_code=500))
    assert lookup.get_all() == []


def test_lookup_unexpected_payload_is_not_cached(monkeypatch):
    calls = _counting_get(monkeypatch, DummyResponse(payload={"error": "x"}))
    lookup = ResourceTypeLookup(url="http://api.test", ttl=300)

    assert lookup.resolve_id("Dataset") is None
    assert lookup.resolve_id("Dataset") is None
    assert len(calls) == 2


def test_concurrent_callers_share_one_fetch(monkeypatch):
    release = threading.Event()
    calls = []
    calls_lock = threading.Lock()

    def slow_get(url, timeout=None):
        with calls_lock:
            calls.append(url)
        release.wait(timeout=5)
        return DummyResponse(payload=RESOURCE_TYPES)

    monkeypatch.setattr(requests, "get", slow_get)
    lookup = ResourceTypeLookup(url="http://api.test", ttl=300)

    results = []
    results_lock = threading.Lock()

    def worker():
        types = lookup.get_all()
        with results_lock:
            results.append(types)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for thread in threads:
        thread.start()
    release.set()
    for thread in threads:
        thread.join(timeout=5)

    assert len(calls) == 1
    assert len(results) == 5
    assert all(len(types) == len(RESOURCE_TYPES) for types in results)


def test_shared_lookup_can_be_reset():
    first = get_resource_type_lookup()
    assert get_resource_type_lookup() is first

    reset_resource_type_lookup()
    assert get_resource_type_lookup() is not first


# ----------------------------------------------------------------------
# Curation query
# ----------------------------------------------------------------------

RESOURCE = {
    "id": 7,
    "doi": " 10.5880/GFZ.2024.001 ",
    "year": 2024,
    "version": "1.0",
    "language": {"code": "en"},
    "resource_type": {"name": "Dataset"},
    "titles": [
        {"title": "Alternative", "title_type": {"slug": "AlternativeTitle"}},
        {"title": "Main", "title_type": {"slug": "MainTitle"}},
        {"title": "   "},
    ],
    "licenses": [{"identifier": "CC-BY-4.0"}, {"identifier": ""}],
    "authors": [
        {
            "type": "person", "position": 1, "firstName": "Bo", "lastName": "Berg", "isContact": "true",
            "email": "bo@example.org",
            "affiliations": [{"value": "GFZ", "rorId": "r1"}, {"value": "GFZ", "rorId": "r1"}],
        },
        {"type": "institution", "position": 0, "institutionName": "GFZ", "rorId": "https://ror.org/04z8jg394"},
    ],
    "contributors": [{"type": "person", "lastName": "Cole", "roles": [{"name": "Editor"}, "Editor"]}],
    "descriptions": [{"descriptionType": "series-information", "description": "Series 2"}],
    "dates": [{"dateType": "created", "startDate": "2024-01-01", "endDate": ""}],
    "freeKeywords": ["rock"],
    "controlledKeywords": [{"id": "k1", "text": "Earth", "path": "A > B", "scheme": "GCMD"}],
    "spatialTemporalCoverages": [{"latMin": 0, "lonMin": 2.5, "description": "Site"}],
    "relatedIdentifiers": [{"identifier": "10.1/y", "relationType": "Cites"}],
    "fundingReferences": [],
}


def test_build_curation_query():
    query = build_curation_query_from_resource(RESOURCE, FakeLookup({"Dataset": "1"}))

    assert query["resourceId"] == "7"
    assert query["doi"] == "10.5880/GFZ.2024.001"
    assert query["year"] == "2024"
    assert query["language"] == "en"
    assert query["resourceType"] == "1"

    assert query["titles[0][title]"] == "Main"
    assert query["titles[0][titleType]"] == "main-title"
    assert query["titles[1][titleType]"] == "alternative-title"
    assert "titles[2][title]" not in query

    assert query["licenses[0]"] == "CC-BY-4.0"
    assert "licenses[1]" not in query

    assert query["authors[0][type]"] == "institution"
    assert query["authors[0][rorId]"] == "https://ror.org/04z8jg394"
    assert query["authors[1][lastName]"] == "Berg"
    assert query["authors[1][isContact]"] == "true"
    assert query["authors[1][affiliations][0][value]"] == "GFZ"
    assert "authors[1][affiliations][1][value]" not in query

    assert query["contributors[0][roles][0]"] == "Editor"
    assert "contributors[0][roles][1]" not in query

    assert query["descriptions[0][type]"] == "SeriesInformation"
    assert query["dates[0][startDate]"] == "2024-01-01"
    assert "dates[0][endDate]" not in query
    assert query["freeKeywords[0]"] == "rock"
    assert query["gcmdKeywords[0][path]"] == "A > B"
    assert "gcmdKeywords[0][language]" not in query
    assert query["coverages[0][latMin]"] == "0"
    assert query["coverages[0][lonMin]"] == "2.5"
    assert "coverages[0][latMax]" not in query

    assert json.loads(query["relatedWorks"]) == RESOURCE["relatedIdentifiers"]
    assert "fundingReferences" not in query
    assert "mslLaboratories" not in query
    assert all(value != "" for value in query.values())


def test_unresolved_resource_type_is_omitted():
    query = build_curation_query_from_resource(RESOURCE, FakeLookup({}))
    assert "resourceType" not in query


def test_untyped_titles_are_promoted():
    query = build_curation_query_from_resource({"titles": [{"title": "First"}, {"title": "Second"}]}, FakeLookup({}))

    assert query["titles[0][titleType]"] == "main-title"
    assert query["titles[1][titleType]"] == "alternative-title"


def test_free_keywords_skip_blank_values():
    query = build_curation_query_from_resource({"freeKeywords": ["", None, " x ", 7, "  y"]}, FakeLookup({}))

    assert query == {"freeKeywords[0]": "x", "freeKeywords[1]": "y"}


def test_parse_curation_query_inverts_the_builder():
    query = build_curation_query_from_resource(RESOURCE, FakeLookup({"Dataset": "1"}))
    query["fundingReferences"] = "{not json"

    parsed = parse_curation_query(query)

    assert parsed["titles"][0] == {"title": "Main", "titleType": "main-title"}
    assert parsed["authors"][1]["affiliations"] == [{"value": "GFZ", "rorId": "r1"}]
    assert parsed["licenses"] == ["CC-BY-4.0"]
    assert parsed["relatedWorks"] == RESOURCE["relatedIdentifiers"]
    assert "fundingReferences" not in parsed


# ----------------------------------------------------------------------
# Citation
# ----------------------------------------------------------------------

def test_citation_with_unknown_creator():
    resource = {
        "creators": [],
        "titles": [{"title": "T", "title_type": "MainTitle"}],
        "year": 2024,
        "publisher": "P",
        "doi": "10.1/x",
    }
    assert build_citation(resource) == "Unknown Creator (2024): T. P. https://doi.org/10.1/x"


def test_citation_reads_current_and_legacy_creators():
    resource = {
        "creators": [
            {"creatorable_type": "Person", "creatorable": {"given_name": "Jane", "family_name": "Doe"}},
            {"creatorable": {"type": "Institution", "name": "GFZ"}},
            {"first_name": "Max", "last_name": "Muster"},
            {"institution_name": "AWI"},
            {"family_name": "Solo"},
        ],
        "titles": [{"title": "Sub", "title_type": "Subtitle"}, {"title": "Main", "title_type": {"slug": "main-title"}}],
        "publication_year": "2023",
        "publisher": {"name": "GFZ Data Services"},
    }

    assert build_citation(resource) == (
        "Doe, Jane; GFZ; Muster, Max; AWI; Solo (2023): Main. GFZ Data Services. DOI not available"
    )


def test_citation_fallbacks():
    assert build_citation({}) == "Unknown Creator (n.d.): Untitled. DOI not available"
    assert build_citation({"titles": [{"title": "First"}]}, default_publisher="GFZ Data Services") == (
        "Unknown Creator (n.d.): First. GFZ Data Services. DOI not available"
    )


@pytest.mark.parametrize("doi", ["10.1/x", "https://doi.org/10.1/x", "http://dx.doi.org/10.1/x", "doi:10.1/x"])
def test_citation_links_bare_doi(doi):
    assert build_citation({"doi": doi}).endswith(" https://doi.org/10.1/x")


def test_citation_uses_resolver_base():
    citation = build_citation({"doi": "doi:10.1/x"}, resolver_base="https://resolver.test")
    assert citation.endswith(" https://resolver.test/10.1/x")


def test_read_creator_name_ignores_non_mappings():
    assert read_creator_name("Jane Doe") == ""
    assert read_creator_name({"creatorable": {"given_name": "Jane"}}) == "Jane"


# ----------------------------------------------------------------------
# Dates
# ----------------------------------------------------------------------

def test_serialize_date_entry():
    assert serialize_date_entry("2024-01-01", "") == "2024-01-01"
    assert serialize_date_entry("", "2024-12-31") == "/2024-12-31"
    assert serialize_date_entry("2024-01-01", "2024-12-31") == "2024-01-01/2024-12-31"
    assert serialize_date_entry(None, None) == ""

    assert parse_date_entry("/2024-12-31") == {"startDate": "", "endDate": "2024-12-31"}
    assert parse_date_entry("2024-01-01") == {"startDate": "2024-01-01", "endDate": ""}


@pytest.mark.parametrize(
    "day, clock, zone",
    [
        ("2024-01-01", "", ""),
        ("2024-02-29", "08:30", ""),
        ("2024-12-31", "23:59:59", "Europe/Berlin"),
        ("1999-06-15", "", "UTC"),
    ],
)
def test_date_time_round_trip(day, clock, zone):
    assert parse_date_time(build_date_time(day, clock, zone)) == {"date": day, "time": clock, "timezone": zone}


def test_build_date_time_rejects_invalid_parts():
    assert build_date_time("") == ""
    for args in (("2024-13-01",), ("2023-02-29",), ("2024-01-01", "24:00"), ("2024-01-01", "10:00", "[UTC]")):
        with pytest.raises(ValueError):
            build_date_time(*args)
    with pytest.raises(ValueError):
        parse_date_time("01.01.2024")
