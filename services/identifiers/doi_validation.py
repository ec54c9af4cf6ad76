"""Format checks for related identifiers and the remote DOI resolver."""

import logging
import re
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel

from config.settings import get_curation_config
from .detection import DOI_SCHEME_PREFIX, DOI_URL_PREFIX, _is_url

logger = logging.getLogger(__name__)


DOI_FORMAT = re.compile(r"^10\.\d{4,}(?:\.\d+)*/\S+$")
HANDLE_FORMAT = re.compile(r"^\d+(?:\.\w+)?/.+$")


class FormatCheck(BaseModel):
    """Outcome of a syntactic identifier check."""
    is_valid: bool
    message: Optional[str] = None


class DoiResolution(BaseModel):
    """Outcome of a DOI lookup against the metadata service."""
    success: bool
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


# ----------------------------------------------------------------------
# FORMAT CHECKS
# ----------------------------------------------------------------------

def validate_doi_format(value: str) -> FormatCheck:
    """Accept bare DOIs as well as doi.org URLs and doi: prefixes."""
    candidate = DOI_URL_PREFIX.sub("", (value or "").strip(), count=1)
    candidate = DOI_SCHEME_PREFIX.sub("", candidate, count=1).strip()
    if DOI_FORMAT.match(candidate):
        return FormatCheck(is_valid=True)
    return FormatCheck(is_valid=False, message="Invalid DOI format. Expected format: 10.xxxx/suffix")


def validate_url_format(value: str) -> FormatCheck:
    if _is_url((value or "").strip()):
        return FormatCheck(is_valid=True)
    return FormatCheck(is_valid=False, message="Invalid URL format. Expected an http(s) URL.")


def validate_handle_format(value: str) -> FormatCheck:
    candidate = re.sub(r"^https?://hdl\.handle\.net/", "", (value or "").strip(), flags=re.IGNORECASE)
    if HANDLE_FORMAT.match(candidate):
        return FormatCheck(is_valid=True)
    return FormatCheck(is_valid=False, message="Invalid Handle format. Expected format: prefix/suffix")


_FORMAT_CHECKS = {
    "DOI": validate_doi_format,
    "URL": validate_url_format,
    "Handle": validate_handle_format,
}


def validate_identifier_format(identifier: str, identifier_type: str) -> FormatCheck:
    """Check an identifier against its declared type; unknown types always pass."""
    if not identifier or not identifier.strip():
        return FormatCheck(is_valid=False, message="Identifier is required.")

    type_name = getattr(identifier_type, "value", identifier_type)
    check = _FORMAT_CHECKS.get(type_name)
    if check is None:
        return FormatCheck(is_valid=True)
    return check(identifier)


# ----------------------------------------------------------------------
# REMOTE RESOLVER
# ----------------------------------------------------------------------

class DoiResolver:
    """Looks up DOIs through the curation API."""

    def __init__(self, endpoint: Optional[str] = None, timeout: Optional[float] = None):
        config = get_curation_config()
        self.endpoint = endpoint or config.validate_doi_url
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds

    def resolve(self, doi: str) -> DoiResolution:
        """Resolve a DOI; failures are reported, never raised."""
        check = validate_doi_format(doi)
        if not check.is_valid:
            return DoiResolution(success=False, error=check.message)

        try:
            response = requests.post(self.endpoint, json={"doi": doi.strip()}, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.warning(f"DOI lookup failed for {doi}: {e}")
            return DoiResolution(success=False, error="DOI lookup failed")
        except ValueError:
            logger.warning("DOI lookup for %s returned a non-JSON body", doi)
            return DoiResolution(success=False, error="Invalid response from DOI service")

        if not isinstance(payload, dict):
            return DoiResolution(success=False, error="Invalid response from DOI service")
        if payload.get("success") is False:
            return DoiResolution(success=False, error=payload.get("error") or "DOI not found")

        metadata = payload.get("metadata", payload)
        return DoiResolution(success=True, metadata=metadata if isinstance(metadata, dict) else None)
