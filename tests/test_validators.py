"""
tests/test_validators.py — Unit tests for registration field validators
"""
from __future__ import annotations

import pytest

from app.utils.validators import (
    is_valid_email,
    is_valid_name,
    is_valid_phone,
    is_valid_status,
    strip_non_digits,
)


def test_name_accepts_letters_and_spaces():
    assert is_valid_name("John Doe")
    assert is_valid_name("  Al  ")


@pytest.mark.parametrize("name", ["", "   ", "J", " J ", "John3", "O'Brien", "Jean-Luc", None, 42])
def test_name_rejects_short_or_non_letter(name):
    assert not is_valid_name(name)


def test_email_accepts_simple_address():
    assert is_valid_email("a@b.co")
    assert is_valid_email("jane.doe+tag@example.co.in")


@pytest.mark.parametrize("email", ["a@@b.com", "ab.com", "a@bcom", "a b@c.com", "@b.com", "a@.com", "", None])
def test_email_rejects_malformed(email):
    assert not is_valid_email(email)


def test_email_is_intentionally_loose():
    # Double dots in the domain slip through the simple pattern
    assert is_valid_email("a@b..com")


def test_phone_strips_formatting():
    assert strip_non_digits("987-654-3210") == "9876543210"
    assert is_valid_phone("987-654-3210")
    assert is_valid_phone("(987) 654 3210")


@pytest.mark.parametrize("phone", ["12345", "98765432101", "", "phone", None])
def test_phone_requires_exactly_ten_digits(phone):
    assert not is_valid_phone(phone)


def test_status_is_case_sensitive():
    assert is_valid_status("single")
    assert is_valid_status("couple")
    assert not is_valid_status("Single")
    assert not is_valid_status("group")
    assert not is_valid_status(None)
