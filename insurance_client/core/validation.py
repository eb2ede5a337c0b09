"""
Input validation for user-entered command fields.

Every check here runs before any network call; failures raise `InvalidInput`
(a ValueError) naming the offending field.
"""
from __future__ import annotations

from typing import Any, Mapping

from web3 import Web3

from insurance_client.core.errors import InvalidInput
from insurance_client.core.identity import is_zero_address


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        raise InvalidInput("expected text or a number, got a boolean")
    return str(value).strip()


def require_fields(fields: Mapping[str, Any], message: str = "Please fill all fields.") -> None:
    """
    Reject the command if any field is missing or blank.

    Raises:
        InvalidInput: Naming the first empty field.
    """
    for name, value in fields.items():
        if not _as_text(value):
            raise InvalidInput(message, field=name)


def parse_record_id(value: Any, field: str) -> int:
    """Parse a policy or claim id: a non-negative integer."""
    text = _as_text(value)
    if not (text.isascii() and text.isdigit()):
        raise InvalidInput(f"{field} must be a non-negative whole number", field=field)
    return int(text)


def parse_positive_int(value: Any, field: str) -> int:
    number = parse_record_id(value, field)
    if number <= 0:
        raise InvalidInput(f"{field} must be greater than zero", field=field)
    return number


def parse_address(value: Any, field: str) -> str:
    """
    Validate an account address and return its checksum form.

    Raises:
        InvalidInput: If the value is not a 20-byte hex address or is the
            zero address.
    """
    text = _as_text(value)
    if not Web3.is_address(text):
        raise InvalidInput(f"{field} must be a valid account address", field=field)
    if is_zero_address(text):
        raise InvalidInput(f"{field} cannot be the zero address", field=field)
    return Web3.to_checksum_address(text)


__all__ = [
    "require_fields",
    "parse_record_id",
    "parse_positive_int",
    "parse_address",
]
