"""
auth/validation.py -- Login and registration input policy.

Checks run in a fixed order and the first failure is raised; errors are never
aggregated. Callers catch auth.errors.ValidationError (or a specific variant).

  validate_login         -- empty fields, identifier length, identifier format
  validate_registration  -- validate_login, then password strength

Lengths are UTF-8 byte counts. Character classes use Unicode general
categories, so non-ASCII letters and symbols count.

The identifier pattern is deliberately narrower than RFC 5322 and must stay
exactly as written: existing accounts were accepted under it.

Layer rule: no imports from api/, core/ or catalog/.
"""

from __future__ import annotations

import re
import unicodedata

from auth.errors import (
    EmptyIdentifier,
    EmptyPassword,
    MalformedIdentifier,
    PasswordEqualsIdentifier,
    PasswordMissingLower,
    PasswordMissingNumber,
    PasswordMissingSpecial,
    PasswordMissingUpper,
    PasswordTooLong,
    PasswordTooShort,
    TooLong,
    TooShort,
)
from auth.passwords import MAX_PASSWORD_BYTES

IDENTIFIER_PATTERN = re.compile(r"[a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9_-]+")

MIN_IDENTIFIER_LENGTH = 3
MAX_IDENTIFIER_LENGTH = 50  # exclusive
MIN_PASSWORD_LENGTH = 8


def _byte_len(value: str) -> int:
    return len(value.encode("utf-8"))


def validate_login(identifier: str, password: str) -> None:
    """Raise the first ValidationError that applies to a login payload."""
    if not identifier.strip():
        raise EmptyIdentifier()
    if not password.strip():
        raise EmptyPassword()

    length = _byte_len(identifier)
    if length < MIN_IDENTIFIER_LENGTH:
        raise TooShort()
    if length >= MAX_IDENTIFIER_LENGTH:
        raise TooLong()

    if IDENTIFIER_PATTERN.fullmatch(identifier) is None:
        raise MalformedIdentifier()


def validate_registration(identifier: str, password: str) -> None:
    """Raise the first ValidationError that applies to a registration payload."""
    validate_login(identifier, password)
    validate_password_strength(identifier, password)


def validate_password_strength(identifier: str, password: str) -> None:
    length = _byte_len(password)
    if length < MIN_PASSWORD_LENGTH:
        raise PasswordTooShort()
    if length > MAX_PASSWORD_BYTES:
        raise PasswordTooLong()

    has_upper = has_lower = has_number = has_special = False
    for char in password:
        category = unicodedata.category(char)
        if category == "Lu":
            has_upper = True
        elif category == "Ll":
            has_lower = True
        elif category.startswith("N"):
            has_number = True
        elif category.startswith(("P", "S")):
            has_special = True

    if not has_upper:
        raise PasswordMissingUpper()
    if not has_lower:
        raise PasswordMissingLower()
    if not has_number:
        raise PasswordMissingNumber()
    if not has_special:
        raise PasswordMissingSpecial()

    if password.casefold() == identifier.casefold():
        raise PasswordEqualsIdentifier()
