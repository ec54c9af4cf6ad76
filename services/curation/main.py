"""Curation service facade and command line interface."""

import json
import logging
import os
import sys
import time
from typing import Any, Dict, Optional, Tuple

import click

from config.models import NormalizationResult, ValidationReport
from config.settings import get_curation_config, get_logging_config
from services.builders import build_citation, build_curation_query_from_resource
from services.builders.resource_types import ResourceTypeLookup
from services.identifiers import (
    detect_identifier_type,
    detect_related_identifier_type,
    detect_funder_identifier_type,
    normalize_identifier,
)
from .csv_import import AgentCSVParser, CSVImportResult
from .normalizer import MetadataNormalizer
from .responses import upload_error_response, validation_error_response
from .upload import UploadValidationError, validate_xml_upload
from .validator import SubmissionValidator
from .vocabularies import TitleTypeLookup

logger = logging.getLogger(__name__)


class CurationService:
    """Normalizes, validates and converts resource metadata."""

    def __init__(
        self,
        title_types: Optional[TitleTypeLookup] = None,
        resource_types: Optional[ResourceTypeLookup] = None,
    ):
        self.config = get_curation_config()
        self.title_types = title_types or TitleTypeLookup()
        self.resource_types = resource_types
        self.normalizer = MetadataNormalizer(self.title_types)
        self.validator = SubmissionValidator(self.title_types)
        self.csv_parser = AgentCSVParser()

        logger.info("Curation service initialized")

    # ------------------------------------------------------------------
    # Submission pipeline
    # ------------------------------------------------------------------
    def process_submission(self, payload: Dict[str, Any]) -> Tuple[NormalizationResult, ValidationReport]:
        """Normalize then validate one submission."""
        start_time = time.time()

        normalized = self.normalizer.normalize(payload)
        report = self.validator.validate(normalized)

        logger.info(
            f"Processed submission in {(time.time() - start_time) * 1000:.1f}ms "
            f"({report.error_count} errors, {len(normalized.dropped)} dropped entries)"
        )
        return normalized, report

    def validate(self, payload: Dict[str, Any]) -> ValidationReport:
        return self.process_submission(payload)[1]

    def submit(self, payload: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """HTTP-style result: 200 with the normalized data, or 422 with the error bag."""
        normalized, report = self.process_submission(payload)
        if not report.is_valid:
            return validation_error_response(report)
        return 200, {"data": normalized.data, "dropped": [d.model_dump() for d in normalized.dropped]}

    # ------------------------------------------------------------------
    # Uploads and imports
    # ------------------------------------------------------------------
    def check_upload(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        content_type: Optional[str] = None,
        user: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> Optional[Tuple[int, Dict[str, Any]]]:
        """None when the upload is acceptable, otherwise the 422 envelope."""
        size = len(content) if content is not None else None
        try:
            validate_xml_upload(filename, size, content_type, content)
        except UploadValidationError as e:
            return upload_error_response(e, filename=filename, user=user, ip=ip)
        return None

    def import_agents(self, csv_data: bytes, contributors: bool = False) -> CSVImportResult:
        if contributors:
            return self.csv_parser.parse_contributors(csv_data)
        return self.csv_parser.parse_authors(csv_data)

    # ------------------------------------------------------------------
    # Builders and identifiers
    # ------------------------------------------------------------------
    def build_query(self, resource: Dict[str, Any]) -> Dict[str, str]:
        return build_curation_query_from_resource(resource, self.resource_types)

    def cite(self, resource: Dict[str, Any]) -> str:
        return build_citation(
            resource,
            default_publisher=self.config.default_publisher,
            resolver_base=self.config.doi_resolver_base,
        )

    def describe_identifier(self, raw: str) -> Dict[str, Optional[str]]:
        """Core kind, canonical form, related-identifier type and funder scheme."""
        kind = detect_identifier_type(raw)
        funder_type = detect_funder_identifier_type(raw)
        return {
            "kind": kind.value,
            "normalized": normalize_identifier(raw.strip(), kind),
            "relatedIdentifierType": detect_related_identifier_type(raw).value,
            "funderIdentifierType": funder_type.value if funder_type else None,
        }


# ----------------------------------------------------------------------
# CLI Commands
# ----------------------------------------------------------------------

def _load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"{path} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a JSON object")
    return data


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


@click.group()
def cli():
    """Dataset metadata curation CLI."""
    logging_config = get_logging_config()
    logging.basicConfig(level=logging_config.level.upper(), format=logging_config.format)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def validate(file: str):
    """Validate a submission JSON file."""
    service = CurationService()
    report = service.validate(_load_json(file))

    if report.is_valid:
        click.echo("Submission is valid")
        return

    status, body = validation_error_response(report)
    _echo_json({"status": status, **body})
    sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def normalize(file: str):
    """Print the normalized form of a submission JSON file."""
    service = CurationService()
    result = service.normalizer.normalize(_load_json(file))
    _echo_json(result.model_dump())


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def query(file: str):
    """Build the editor query map for a stored resource JSON file."""
    service = CurationService()
    _echo_json(service.build_query(_load_json(file)))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def cite(file: str):
    """Print the citation of a resource JSON file."""
    service = CurationService()
    click.echo(service.cite(_load_json(file)))


@cli.command()
@click.argument("identifier")
def detect(identifier: str):
    """Classify an identifier."""
    service = CurationService()
    _echo_json(service.describe_identifier(identifier))


@cli.command("import-authors")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--contributors", is_flag=True, help="Parse the file as a contributor list.")
def import_authors(csv_file: str, contributors: bool):
    """Parse an author (or contributor) CSV file."""
    service = CurationService()
    with open(csv_file, "rb") as handle:
        result = service.import_agents(handle.read(), contributors=contributors)

    _echo_json(result.model_dump())
    if not result.is_valid:
        sys.exit(1)


@cli.command("check-upload")
@click.argument("xml_file", type=click.Path(exists=True, dir_okay=False))
def check_upload(xml_file: str):
    """Run the pre-parse checks on a DataCite XML file."""
    service = CurationService()
    with open(xml_file, "rb") as handle:
        content = handle.read()

    failure = service.check_upload(os.path.basename(xml_file), content, content_type="application/xml")
    if failure is None:
        click.echo("Upload accepted")
        return

    status, body = failure
    _echo_json({"status": status, **body})
    sys.exit(1)


if __name__ == "__main__":
    cli()
