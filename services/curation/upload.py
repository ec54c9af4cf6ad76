"""Pre-parse checks for DataCite XML uploads."""

import logging
import os
from typing import Optional

from lxml import etree

from config.models import UploadErrorKind
from config.settings import get_curation_config

logger = logging.getLogger(__name__)


class UploadValidationError(Exception):
    """Raised when an uploaded file is rejected; carries an explicit kind."""

    def __init__(
        self,
        kind: UploadErrorKind,
        message: str,
        field: str = "file",
        row: Optional[int] = None,
        identifier: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field = field
        self.row = row
        self.identifier = identifier


def validate_xml_upload(
    filename: Optional[str],
    size: Optional[int],
    content_type: Optional[str] = None,
    content: Optional[bytes] = None,
) -> None:
    """Reject missing, empty, oversized, non-XML or malformed uploads."""
    config = get_curation_config()

    if not filename:
        raise UploadValidationError(UploadErrorKind.FILE_MISSING, "The file field is required.")

    if size is None or size <= 0:
        raise UploadValidationError(UploadErrorKind.EMPTY_FILE, "The uploaded file is empty.")

    if size > config.max_upload_bytes:
        limit_kb = config.max_upload_bytes // 1024
        raise UploadValidationError(
            UploadErrorKind.FILE_TOO_LARGE,
            f"The file field must not be greater than {limit_kb} kilobytes.",
        )

    extension = os.path.splitext(filename)[1].lower()
    media_type = (content_type or "").split(";")[0].strip().lower()
    if extension not in config.allowed_upload_extensions or (
        media_type and media_type not in config.allowed_upload_content_types
    ):
        raise UploadValidationError(
            UploadErrorKind.INVALID_TYPE,
            "The file field must be a file of type: xml.",
        )

    if content is not None:
        parser = etree.XMLParser(recover=False, resolve_entities=False, no_network=True)
        try:
            etree.fromstring(content, parser=parser)
        except etree.XMLSyntaxError as e:
            line = e.lineno if e.lineno else None
            raise UploadValidationError(
                UploadErrorKind.MALFORMED_XML,
                f"The uploaded file is not well-formed XML: {e.msg}",
                row=line,
            ) from e

    logger.debug("Upload %s passed pre-parse checks (%d bytes)", filename, size)
