import pytest
import requests

from config.models import FunderIdentifierType, IdentifierKind, IdentifierType
from services.identifiers import (
    DoiResolver,
    detect_funder_identifier_type,
    detect_identifier_type,
    detect_related_identifier_type,
    normalize_identifier,
    validate_doi_format,
    validate_handle_format,
    validate_identifier_format,
    validate_url_format,
)
from conftest import DummyResponse


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10.5880/fidgeo.2025.072", IdentifierKind.DOI),
        ("https://doi.org/10.5880/x", IdentifierKind.DOI),
        ("https://dx.doi.org/10.5880/x", IdentifierKind.DOI),
        ("HTTPS://DOI.ORG/10.5880/x", IdentifierKind.DOI),
        ("doi:10.5880/x", IdentifierKind.DOI),
        ("11708/ABC-123", IdentifierKind.HANDLE),
        ("https://hdl.handle.net/11708/ABC-123", IdentifierKind.HANDLE),
        ("https://example.org/data?id=1", IdentifierKind.URL),
        ("11708/   ", IdentifierKind.OTHER),
        ("10.5880", IdentifierKind.OTHER),
        ("abc/def", IdentifierKind.OTHER),
        ("ftp://example.org/file", IdentifierKind.OTHER),
        ("   ", IdentifierKind.OTHER),
    ],
)
def test_detect_identifier_type(raw, expected):
    assert detect_identifier_type(raw) is expected


def test_normalize_identifier_strips_doi_prefixes_only():
    assert normalize_identifier("https://doi.org/10.5880/x", IdentifierKind.DOI) == "10.5880/x"
    assert normalize_identifier("doi:10.5880/x", "DOI") == "10.5880/x"
    assert normalize_identifier("https://hdl.handle.net/11708/A", IdentifierKind.HANDLE) == \
        "https://hdl.handle.net/11708/A"
    assert normalize_identifier("https://example.org", IdentifierKind.URL) == "https://example.org"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://doi.org/10.60516/ABC123", IdentifierType.IGSN),
        ("10.273/XYZ", IdentifierType.IGSN),
        ("10.1594/WDCC/CMIP6", IdentifierType.HANDLE),
        ("10.5880/fidgeo.2025.072", IdentifierType.DOI),
        ("https://doi.org/10.5880/x", IdentifierType.DOI),
        ("arXiv:2101.00001", IdentifierType.ARXIV),
        ("2101.00001v2", IdentifierType.ARXIV),
        ("https://arxiv.org/abs/2101.00001", IdentifierType.ARXIV),
        ("978-3-16-148410-0", IdentifierType.ISBN),
        ("urn:isbn:3161484100", IdentifierType.ISBN),
        ("ark:/12345/x54xz321", IdentifierType.ARK),
        ("PMID: 12345678", IdentifierType.PMID),
        ("https://w3id.org/example/ontology", IdentifierType.W3ID),
        ("https://purl.org/dc/terms", IdentifierType.PURL),
        ("1234-5678", IdentifierType.EISSN),
        ("urn:nbn:de:kobv:b103-12345", IdentifierType.URN),
        ("https://example.org/page", IdentifierType.URL),
        ("10.5880 dataset description", IdentifierType.URL),
        ("abc/def", IdentifierType.DOI),
    ],
)
def test_detect_related_identifier_type(raw, expected):
    assert detect_related_identifier_type(raw) is expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://ror.org/04z8jg394", FunderIdentifierType.ROR),
        ("ror.org/04z8jg394", FunderIdentifierType.ROR),
        ("10.13039/501100001659", FunderIdentifierType.CROSSREF),
        ("https://doi.org/10.13039/501100001659", FunderIdentifierType.CROSSREF),
        ("0000 0001 2162 673X", FunderIdentifierType.ISNI),
        ("https://isni.org/isni/000000012162673X", FunderIdentifierType.ISNI),
        ("https://www.grid.ac/institutes/grid.23731.34", FunderIdentifierType.GRID),
        ("DFG-12345", FunderIdentifierType.OTHER),
    ],
)
def test_detect_funder_identifier_type(raw, expected):
    assert detect_funder_identifier_type(raw) is expected


def test_detect_funder_identifier_type_empty():
    assert detect_funder_identifier_type(None) is None
    assert detect_funder_identifier_type("  ") is None


def test_format_checks():
    assert validate_doi_format("https://doi.org/10.5880/GFZ.1.2.2024.001").is_valid
    assert not validate_doi_format("10.12/x").is_valid
    assert validate_url_format("https://example.org").is_valid
    assert not validate_url_format("example.org").is_valid
    assert validate_handle_format("https://hdl.handle.net/11708/A").is_valid
    assert not validate_handle_format("ABC/1").is_valid


def test_validate_identifier_format_by_type():
    check = validate_identifier_format("not a doi", "DOI")
    assert not check.is_valid
    assert check.message == "Invalid DOI format. Expected format: 10.xxxx/suffix"

    assert validate_identifier_format("anything", IdentifierType.ISBN).is_valid
    assert validate_identifier_format("  ", "URL").message == "Identifier is required."


def test_doi_resolver_returns_metadata(monkeypatch):
    calls = {}

    def fake_post(url, json=None, timeout=None):
        calls["url"] = url
        calls["json"] = json
        calls["timeout"] = timeout
        return DummyResponse(payload={"success": True, "metadata": {"title": "Data"}})

    monkeypatch.setattr(requests, "post", fake_post)

    resolver = DoiResolver(endpoint="http://api.test/validate-doi", timeout=2.5)
    result = resolver.resolve(" 10.5880/x ")

    assert result.success is True
    assert result.metadata == {"title": "Data"}
    assert calls == {"url": "http://api.test/validate-doi", "json": {"doi": "10.5880/x"}, "timeout": 2.5}


def test_doi_resolver_rejects_bad_format_without_request(monkeypatch):
    def fail_post(*args, **kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr(requests, "post", fail_post)

    result = DoiResolver(endpoint="http://api.test").resolve("nonsense")
    assert result.success is False
    assert result.error.startswith("Invalid DOI format")


def test_doi_resolver_reports_failures(monkeypatch):
    resolver = DoiResolver(endpoint="http://api.test")

    def network_down(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(requests, "post", network_down)
    assert resolver.resolve("10.5880/x").error == "DOI lookup failed"

    monkeypatch.setattr(requests, "post", lambda *a, **k: DummyResponse(status_code=404))
    assert resolver.resolve("10.5880/x").error == "DOI lookup failed"

    monkeypatch.setattr(requests, "post", lambda *a, **k: DummyResponse(json_error=True))
    assert resolver.resolve("10.5880/x").error == "Invalid response from DOI service"

    monkeypatch.setattr(
        requests, "post", lambda *a, **k: DummyResponse(payload={"success": False, "error": "DOI not registered"})
    )
    assert resolver.resolve("10.5880/x").error == "DOI not registered"
