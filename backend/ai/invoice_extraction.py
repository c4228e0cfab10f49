"""
Invoice extraction: structured fields from an uploaded invoice image.

The document arrives as a data URI ("data:<mime>;base64,<payload>"), the
way the browser's FileReader produces it. The URI is checked and passed to
the vision model as-is; the model does the reading, this module only
validates what comes back. Nothing is cached: a failed extraction is retried
with a new upload.
"""

import base64
import binascii
import logging
import re
import time
from typing import NamedTuple, Optional

from app.core.audit import AuditLog
from app.core.config import settings
from app.core.exceptions import ExtractionFailed, ValidationFailed

from .advisor_schema import InvoiceExtraction
from .groq_client import GroqClient, get_groq_client
from .output_parser import parse_and_validate
from .prompts import build_extraction_messages

logger = logging.getLogger(__name__)

FLOW = "invoice_extraction"

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[\w.+-]+)*;base64,(?P<data>.*)$", re.DOTALL)


class DecodedUpload(NamedTuple):
    mime_type: str
    size: int


def parse_data_uri(data_uri: str) -> DecodedUpload:
    """Validate a base64 data URI holding an image or PDF."""
    match = _DATA_URI.match(data_uri.strip())
    if not match:
        raise ValidationFailed("Upload must be a base64 data URI (data:<mimetype>;base64,<data>)")

    mime_type = match.group("mime").lower()
    if not (mime_type.startswith("image/") or mime_type == "application/pdf"):
        raise ValidationFailed(f"Unsupported file type {mime_type}; upload an image or PDF")

    try:
        payload = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationFailed("Upload payload is not valid base64")

    if not payload:
        raise ValidationFailed("Uploaded file is empty")
    if len(payload) > settings.MAX_UPLOAD_BYTES:
        raise ValidationFailed(
            f"Uploaded file is {len(payload)} bytes; the limit is {settings.MAX_UPLOAD_BYTES}"
        )
    return DecodedUpload(mime_type, len(payload))


def extract_invoice_data(data_uri: str, client: Optional[GroqClient] = None) -> InvoiceExtraction:
    upload = parse_data_uri(data_uri)
    client = client or get_groq_client()
    if not client.is_available():
        AuditLog.log_advisor_call(FLOW, False, reason="client unavailable")
        raise ExtractionFailed("Invoice extraction is not configured")

    logger.info(f"Extracting invoice fields from {upload.mime_type} upload ({upload.size} bytes)")
    started = time.perf_counter()
    raw = client.complete_json(
        build_extraction_messages(data_uri),
        model=settings.GROQ_VISION_MODEL,
        max_tokens=2048,
    )
    elapsed_ms = (time.perf_counter() - started) * 1000

    result = parse_and_validate(raw, InvoiceExtraction)
    if result is None:
        AuditLog.log_advisor_call(FLOW, False, elapsed_ms, reason="response failed validation")
        raise ExtractionFailed("The assistant could not produce invoice fields for this upload")

    AuditLog.log_advisor_call(FLOW, True, elapsed_ms)
    return result
