"""
Translation of backend error codes into field-level validation failures.

Codes follow the Parse error constants. A code missing from the table is
not a validation problem: `translate` raises `ParseError` for it.
"""

from __future__ import annotations

from typing import Mapping, NamedTuple

from parse_resource.domain.models import ErrorPayload
from parse_resource.exceptions import ParseError

BASE_FIELD = "base"


class FieldFailure(NamedTuple):
    field: str
    message: str


INCORRECT_TYPE = 111
INVALID_FILE_NAME = 122
INVALID_EMAIL_ADDRESS = 125
USERNAME_MISSING = 200
PASSWORD_MISSING = 201
USERNAME_TAKEN = 202
EMAIL_TAKEN = 203
EMAIL_MISSING = 204
EMAIL_NOT_FOUND = 205

ERROR_CODES: Mapping[int, FieldFailure] = {
    USERNAME_TAKEN: FieldFailure("username", "must be unique"),
    INCORRECT_TYPE: FieldFailure(
        BASE_FIELD, f"field set to incorrect type. Error code {INCORRECT_TYPE}."
    ),
    INVALID_EMAIL_ADDRESS: FieldFailure("email", "must be valid"),
    INVALID_FILE_NAME: FieldFailure(
        "file_name",
        "contains only a-zA-Z0-9_. characters and is between 1 and 36 characters.",
    ),
    EMAIL_MISSING: FieldFailure("email", "must not be missing"),
    EMAIL_TAKEN: FieldFailure("email", "has already been taken"),
    USERNAME_MISSING: FieldFailure("username", "is missing or empty"),
    PASSWORD_MISSING: FieldFailure("password", "is missing or empty"),
    EMAIL_NOT_FOUND: FieldFailure("user", "with specified email not found"),
}


def translate(payload: ErrorPayload) -> FieldFailure:
    """
    Map a structured rejection to the field and message it concerns.

    Raises
    ------
    ParseError
        If the code has no mapping.
    """
    try:
        return ERROR_CODES[payload.code]
    except KeyError:
        raise ParseError(payload.code, payload.error) from None


__all__ = [
    "BASE_FIELD",
    "ERROR_CODES",
    "FieldFailure",
    "translate",
]
