"""
Account identity helpers.

Addresses are compared case-insensitively everywhere; the checksum casing
returned by the provider is kept only for display.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional


ZERO_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"


def normalize_address(address: str) -> str:
    """
    Lower-case form used for every address comparison.

    Raises:
        ValueError: If the address is not a non-empty string.
    """
    if not isinstance(address, str):
        raise ValueError("address must be a string")
    normalized = address.strip()
    if not normalized:
        raise ValueError("address cannot be empty")
    return normalized.lower()


def addresses_equal(left: Optional[str], right: Optional[str]) -> bool:
    if not left or not right:
        return False
    return normalize_address(left) == normalize_address(right)


def is_zero_address(address: Optional[str]) -> bool:
    if not address:
        return False
    return normalize_address(address) == ZERO_ADDRESS


def shorten_address(address: str) -> str:
    """Display form such as `0x1234...abcd`."""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


@dataclass(frozen=True)
class Identity:
    """A connected account."""

    address: str

    def matches(self, other: Optional[str]) -> bool:
        return addresses_equal(self.address, other)

    @property
    def short(self) -> str:
        return shorten_address(self.address)

    def __str__(self) -> str:
        return self.address


class AuthorizationStatus(str, Enum):
    AUTHORIZED = "authorized"
    ACCESS_DENIED = "access_denied"
    CONTRACT_INCOMPATIBLE = "contract_incompatible"


@dataclass(frozen=True)
class AuthorizationResult:
    """
    Outcome of the admin probe.

    `ACCESS_DENIED` means the authority was read and differs from the
    connected account (wrong account). `CONTRACT_INCOMPATIBLE` means neither
    accessor could be read at all (wrong contract).
    """

    status: AuthorizationStatus
    message: str
    authority: Optional[str] = None
    accessor: Optional[str] = None

    @property
    def authorized(self) -> bool:
        return self.status is AuthorizationStatus.AUTHORIZED


__all__ = [
    "ZERO_ADDRESS",
    "Identity",
    "AuthorizationStatus",
    "AuthorizationResult",
    "normalize_address",
    "addresses_equal",
    "is_zero_address",
    "shorten_address",
]
