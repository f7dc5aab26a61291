"""
app/utils/sanitizer.py — Form input sanitization
Strips angle brackets and caps length before validation runs.
Not an HTML sanitizer; it only defeats naive tag injection into the sheet.
"""
from __future__ import annotations

from typing import Any, MutableMapping

MAX_FIELD_LENGTH = 200
REGISTRATION_FIELDS = ("name", "email", "phone", "status")

_ANGLE_BRACKETS = str.maketrans("", "", "<>")


def sanitize_field(value: Any) -> Any:
    """Trim, drop < and >, truncate to MAX_FIELD_LENGTH. Non-strings pass through."""
    if not isinstance(value, str):
        return value
    # Brackets go before trimming and the cut is re-trimmed, so a second pass is a no-op
    return value.translate(_ANGLE_BRACKETS).strip()[:MAX_FIELD_LENGTH].rstrip()


def sanitize_registration_data(data: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """
    Sanitize the registration fields of `data` in place and return it.
    Absent or empty fields are left alone so the validator still reports them missing.
    Status is case-folded here; the status validator is case-sensitive.
    """
    for field in REGISTRATION_FIELDS:
        if data.get(field):
            data[field] = sanitize_field(data[field])

    status = data.get("status")
    if isinstance(status, str):
        data["status"] = status.lower()
    return data
