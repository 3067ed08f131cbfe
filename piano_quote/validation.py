"""Input checks and attachment decoding for quote requests."""

from __future__ import annotations

import base64
import logging
import re
from typing import Any, Iterable

from .errors import ValidationError
from .models import Attachment, QuoteRequest

log = logging.getLogger("piano-quote.validation")

MISSING_FIELDS = "Missing required fields"
INVALID_EMAIL = "Invalid email format"

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

B64_NOISE_RE = re.compile(r"[^A-Za-z0-9+/]")
URLSAFE_B64 = str.maketrans("-_", "+/")

REQUIRED_FIELDS = (
    ("fullName", "full_name"),
    ("email", "email"),
    ("phone", "phone"),
)


def missing_fields(quote: QuoteRequest) -> list[str]:
    return [wire for wire, attr in REQUIRED_FIELDS if not getattr(quote, attr).strip()]


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))


def validate_quote(quote: QuoteRequest) -> None:
    missing = missing_fields(quote)
    if missing:
        raise ValidationError(MISSING_FIELDS, fields=missing)
    if not is_valid_email(quote.email):
        raise ValidationError(INVALID_EMAIL, fields=["email"])


def decode_attachments(entries: Iterable[Any]) -> list[Attachment]:
    """Decode well-formed ``{filename, contentBase64}`` entries, keeping their order.

    Entries without a filename or content are dropped, never rejected. Content
    is decoded leniently and never causes an entry to be dropped.
    """
    decoded: list[Attachment] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            log.warning("Dropping attachment #%d: not an object", index)
            continue
        filename = entry.get("filename")
        content = entry.get("contentBase64") or entry.get("content")
        if not filename or not content or not isinstance(filename, str) or not isinstance(content, str):
            log.warning("Dropping attachment #%d: missing filename or content", index)
            continue
        decoded.append(Attachment(filename=filename, content=_b64decode(content)))
    return decoded


def _b64decode(content: str) -> bytes:
    if content.startswith("data:") and "," in content:
        content = content.split(",", 1)[1]
    # Decoding stops at the first pad; characters outside the alphabet are skipped.
    content = B64_NOISE_RE.sub("", content.split("=", 1)[0].translate(URLSAFE_B64))
    if len(content) % 4 == 1:
        content = content[:-1]
    return base64.b64decode(content + "=" * (-len(content) % 4))
