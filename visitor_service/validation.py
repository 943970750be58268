"""
Input validation and sanitization for visitor submissions.

Fields are checked on their cleaned but untruncated value, so oversized
input is reported instead of being silently cut down. Truncation in
``sanitize_text`` only guards what reaches the store.
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from .errors import ValidationFailed
from .schemas import VisitorSubmission

MAX_FIELD_LENGTH = 255
MAX_USER_AGENT_LENGTH = 1000

# (payload key, submission attribute)
REQUIRED_FIELDS = (
    ("firstName", "first_name"),
    ("company", "company"),
    ("role", "role"),
)


def _clean(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.replace("\x00", "").strip()


def _encodable(text: str) -> bool:
    # Lone surrogates survive JSON decoding but cannot be stored.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def sanitize_text(value: Any, max_length: Optional[int] = MAX_FIELD_LENGTH) -> str:
    """
    Sanitize a single text field.

    Non-string input becomes ``""``. Null bytes and unencodable code points
    are removed, surrounding whitespace is trimmed and the result is
    truncated to ``max_length``.
    """
    text = _clean(value)
    if not _encodable(text):
        text = text.encode("utf-8", "ignore").decode("utf-8").strip()
    if max_length is not None and len(text) > max_length:
        text = text[:max_length]
    return text


def collect_errors(payload: Mapping[str, Any]) -> List[str]:
    """Return every field violation in ``payload``; empty when it is valid."""
    errors: List[str] = []
    for key, _attr in REQUIRED_FIELDS:
        value = _clean(payload.get(key))
        if not value:
            errors.append(f"{key} is required")
        elif not _encodable(value):
            errors.append(f"{key} contains invalid characters")
        elif len(value) > MAX_FIELD_LENGTH:
            errors.append(f"{key} must be {MAX_FIELD_LENGTH} characters or fewer")
    return errors


def validate_submission(payload: Any) -> VisitorSubmission:
    """
    Validate a decoded request body and return its sanitized values.

    Raises ValidationFailed carrying all violations at once.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    errors = collect_errors(payload)
    if errors:
        raise ValidationFailed(errors)

    user_agent = sanitize_text(payload.get("userAgent"), max_length=MAX_USER_AGENT_LENGTH)
    fields = {attr: sanitize_text(payload.get(key)) for key, attr in REQUIRED_FIELDS}
    return VisitorSubmission(user_agent=user_agent or None, **fields)
