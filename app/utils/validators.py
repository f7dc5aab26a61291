"""
app/utils/validators.py — Registration field validators
Pure predicates: never raise, any non-string input is invalid.
"""
from __future__ import annotations

import re
from typing import Any

# Intentionally loose: one @, non-empty local part, a dot in the domain.
# Not RFC 5322 — some odd-but-valid addresses fail, some malformed ones pass.
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_RE = re.compile(r"^[a-zA-Z\s]+$")
PHONE_RE = re.compile(r"^[0-9]{10}$")
NON_DIGIT_RE = re.compile(r"\D", re.ASCII)

STATUS_OPTIONS = ("single", "couple")


def strip_non_digits(value: str) -> str:
    return NON_DIGIT_RE.sub("", value)


def is_valid_name(name: Any) -> bool:
    """At least 2 characters after trimming, ASCII letters and spaces only."""
    if not isinstance(name, str):
        return False
    trimmed = name.strip()
    if len(trimmed) < 2:
        return False
    return NAME_RE.fullmatch(trimmed) is not None


def is_valid_email(email: Any) -> bool:
    if not isinstance(email, str):
        return False
    return EMAIL_RE.fullmatch(email) is not None


def is_valid_phone(phone: Any) -> bool:
    """Exactly 10 digits once every non-digit character is removed."""
    if not isinstance(phone, str):
        return False
    return PHONE_RE.fullmatch(strip_non_digits(phone)) is not None


def is_valid_status(status: Any) -> bool:
    # Case-sensitive; sanitization folds case before this runs
    return isinstance(status, str) and status in STATUS_OPTIONS
