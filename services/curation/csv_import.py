"""CSV import of authors and contributors (spreadsheet exports, German or English headers)."""

import io
import logging
import re
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, Field

from config.models import AgentType

logger = logging.getLogger(__name__)


ENCODINGS = ["utf-8", "utf-8-sig", "cp1252", "iso-8859-1"]
ORCID_PATTERN = re.compile(r"^\d{4}-\d{4}-\d{4}-\d{3}[0-9X]$")
CONTACT_FLAGS = {"yes", "ja", "true", "1"}


class CSVRowError(BaseModel):
    """Problem found in one data row; row numbers count the header as row 1."""
    row: int
    field: str
    value: str = ""
    message: str


class CSVImportResult(BaseModel):
    """Agents parsed from a CSV file plus the rows that were rejected."""
    agents: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[CSVRowError] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda header: any(needle in header for needle in needles)


def _equals(*names: str) -> Callable[[str], bool]:
    return lambda header: header in names


AUTHOR_COLUMNS = {
    "type": _contains("type", "typ"),
    "firstName": _contains("first", "vorname", "given"),
    "lastName": _contains("last", "nachname", "family"),
    "orcid": _contains("orcid"),
    "email": _contains("email", "mail"),
    "institutionName": _equals("institution name", "institution", "institutionname"),
    "affiliations": _contains("affiliation"),
    "isContact": _contains("contact"),
}

CONTRIBUTOR_COLUMNS = {
    "type": _contains("type", "typ"),
    "firstName": _contains("first", "vorname", "given"),
    "lastName": _contains("last", "nachname", "family"),
    "orcid": _contains("orcid"),
    "email": _contains("email", "mail"),
    "institutionName": _contains("organization", "organisation", "institution"),
    "affiliations": _contains("affiliation"),
    "roles": _contains("role", "contributor"),
}


class AgentCSVParser:
    """Parses author and contributor lists exported from spreadsheets."""

    def parse_authors(self, csv_data: bytes) -> CSVImportResult:
        return self._parse(csv_data, AUTHOR_COLUMNS, contributor=False)

    def parse_contributors(self, csv_data: bytes) -> CSVImportResult:
        return self._parse(csv_data, CONTRIBUTOR_COLUMNS, contributor=True)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------
    def _decode(self, csv_data: bytes) -> str:
        """Robust decoding for Windows/Excel exports."""
        for enc in ENCODINGS:
            try:
                text = csv_data.decode(enc)
                logger.info(f"CSV decoded using encoding: {enc}")
                return text
            except UnicodeDecodeError:
                continue
        raise UnicodeDecodeError(
            "AgentCSVParser", b"", 0, 0,
            "Unable to decode CSV using utf-8, utf-8-sig, cp1252, or iso-8859-1."
        )

    def _load(self, csv_data: bytes) -> pd.DataFrame:
        text = self._decode(csv_data).lstrip("\ufeff")
        if not text.strip():
            return pd.DataFrame()
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skipinitialspace=True)
        return df.fillna("")

    # ------------------------------------------------------------------
    # Row parsing
    # ------------------------------------------------------------------
    @staticmethod
    def _resolve_columns(headers: List[str], matchers: Dict[str, Callable[[str], bool]]) -> Dict[str, Optional[str]]:
        resolved: Dict[str, Optional[str]] = {}
        for key, matches in matchers.items():
            resolved[key] = next((h for h in headers if matches(str(h).strip().lower())), None)
        return resolved

    def _parse(self, csv_data: bytes, matchers: Dict[str, Callable[[str], bool]], contributor: bool) -> CSVImportResult:
        result = CSVImportResult()
        df = self._load(csv_data)

        if df.empty:
            result.errors.append(CSVRowError(row=0, field="file", message="CSV file is empty or has no data rows"))
            return result

        columns = self._resolve_columns(list(df.columns), matchers)
        logger.debug("Resolved CSV columns: %s", columns)

        for index, row in df.iterrows():
            row_number = int(index) + 2

            def cell(key: str) -> str:
                column = columns.get(key)
                return str(row[column]).strip() if column else ""

            agent, errors = self._build_agent(cell, row_number, contributor)
            if errors:
                result.errors.extend(errors)
                continue
            result.agents.append(agent)

        logger.info(
            "Parsed %d %s from CSV (%d rejected rows)",
            len(result.agents),
            "contributors" if contributor else "authors",
            len({e.row for e in result.errors}),
        )
        return result

    def _build_agent(self, cell: Callable[[str], str], row_number: int, contributor: bool):
        type_value = cell("type").lower()
        institution_types = {"institution", "organization", "organisation"} if contributor else {"institution"}
        agent_type = AgentType.INSTITUTION if type_value in institution_types else AgentType.PERSON

        errors: List[CSVRowError] = []
        first_name, last_name = cell("firstName"), cell("lastName")
        institution_name = cell("institutionName")
        orcid = cell("orcid")

        if agent_type is AgentType.PERSON and not first_name and not last_name:
            errors.append(CSVRowError(
                row=row_number, field="name",
                message="First name or last name required for person type",
            ))
        if agent_type is AgentType.INSTITUTION and not institution_name:
            errors.append(CSVRowError(
                row=row_number, field="institution name",
                message="Institution name required for institution type",
            ))
        if orcid and not ORCID_PATTERN.match(orcid):
            errors.append(CSVRowError(
                row=row_number, field="orcid", value=orcid,
                message="Invalid ORCID format (expected: 0000-0000-0000-0000)",
            ))
        if errors:
            return None, errors

        affiliations = [a.strip() for a in cell("affiliations").split(",") if a.strip()]

        if agent_type is AgentType.PERSON:
            agent: Dict[str, Any] = {
                "type": agent_type.value,
                "firstName": first_name,
                "lastName": last_name,
                "orcid": orcid,
                "email": cell("email"),
                "affiliations": affiliations,
            }
            if not contributor:
                agent["isContact"] = cell("isContact").lower() in CONTACT_FLAGS
        else:
            agent = {
                "type": agent_type.value,
                "institutionName": institution_name,
                "affiliations": affiliations,
            }
            if not contributor:
                agent["isContact"] = False

        if contributor:
            agent["roles"] = [r.strip() for r in cell("roles").split(",") if r.strip()]
        return agent, []
