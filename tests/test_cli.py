import json

from click.testing import CliRunner

from services.curation.main import CurationService, cli


def _write(tmp_path, name, content):
    path = tmp_path / name
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return str(path)


def test_validate_accepts_valid_submission(tmp_path, submission):
    path = _write(tmp_path, "submission.json", json.dumps(submission))

    result = CliRunner().invoke(cli, ["validate", path])

    assert result.exit_code == 0
    assert "Submission is valid" in result.output


def test_validate_fails_on_invalid_submission(tmp_path, submission):
    submission["descriptions"] = []
    path = _write(tmp_path, "submission.json", json.dumps(submission))

    result = CliRunner().invoke(cli, ["validate", path])

    assert result.exit_code == 1
    assert '"status": 422' in result.output
    assert "An Abstract description is required." in result.output


def test_normalize_prints_dropped_entries(tmp_path):
    path = _write(tmp_path, "submission.json", json.dumps({"dates": [{"dateType": ""}]}))

    result = CliRunner().invoke(cli, ["normalize", path])

    assert result.exit_code == 0
    assert '"collection": "dates"' in result.output


def test_cite_uses_configured_publisher(tmp_path):
    resource = {"titles": [{"title": "T", "title_type": "MainTitle"}], "year": 2024, "doi": "10.1/x"}
    path = _write(tmp_path, "resource.json", json.dumps(resource))

    result = CliRunner().invoke(cli, ["cite", path])

    assert result.exit_code == 0
    assert "Unknown Creator (2024): T. GFZ Data Services. https://doi.org/10.1/x" in result.output


def test_query_without_resource_type(tmp_path):
    path = _write(tmp_path, "resource.json", json.dumps({"doi": "10.1/x", "freeKeywords": ["rock"]}))

    result = CliRunner().invoke(cli, ["query", path])

    assert result.exit_code == 0
    assert '"freeKeywords[0]": "rock"' in result.output


def test_detect_identifier():
    result = CliRunner().invoke(cli, ["detect", "https://doi.org/10.5880/fidgeo.2025.072"])

    assert result.exit_code == 0
    assert '"kind": "DOI"' in result.output
    assert '"normalized": "10.5880/fidgeo.2025.072"' in result.output


def test_import_authors(tmp_path):
    path = _write(tmp_path, "authors.csv", "Type,First Name,Last Name\nperson,Jane,Doe\n")

    result = CliRunner().invoke(cli, ["import-authors", path])

    assert result.exit_code == 0
    assert '"lastName": "Doe"' in result.output


def test_check_upload_rejects_malformed_xml(tmp_path):
    path = _write(tmp_path, "resource.xml", b"<resource><titles></resource>")

    result = CliRunner().invoke(cli, ["check-upload", path])

    assert result.exit_code == 1
    assert '"code": "malformed_xml"' in result.output


def test_malformed_json_is_a_usage_error(tmp_path):
    path = _write(tmp_path, "submission.json", "{not json")

    result = CliRunner().invoke(cli, ["validate", path])

    assert result.exit_code == 2
    assert "is not valid JSON" in result.output


def test_cite_uses_configured_resolver():
    service = CurationService()
    service.config = service.config.model_copy(update={"doi_resolver_base": "https://resolver.test/"})

    citation = service.cite({"titles": [{"title": "T"}], "doi": "https://doi.org/10.1/x"})

    assert citation.endswith("GFZ Data Services. https://resolver.test/10.1/x")
