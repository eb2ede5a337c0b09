"""
Typed projections of the contract's policy and claim records.

The contract returns records either as named mappings or as positional
tuples, depending on how the ABI names its outputs. The decoders below are
the only place raw return values are interpreted; they fail closed with
`RecordDecodeError` on any missing or mistyped field instead of guessing.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from insurance_client.core.errors import RecordDecodeError
from insurance_client.core.identity import is_zero_address


# Positional layout of `policies(id)` and `claims(id)` in the packaged ABI.
POLICY_FIELDS: Tuple[str, ...] = ("id", "holder", "premium", "coverage", "expiry", "active")
CLAIM_FIELDS: Tuple[str, ...] = ("id", "policyId", "claimant", "amount", "approved", "paid")

# Some deployments spell the claim's policy reference differently.
_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "policyId": ("policyId", "policyID", "policy_id"),
}


class ClaimStatus(str, Enum):
    """Display status derived from a claim's (approved, paid) flags."""
    PENDING = "Pending"
    APPROVED = "Approved"
    PAID = "Paid"


def derive_claim_status(approved: bool, paid: bool) -> ClaimStatus:
    """
    Map the raw flags onto a status.

    `paid` wins regardless of `approved`; the contract is expected to only pay
    approved claims but that is not re-verified here.
    """
    if paid:
        return ClaimStatus.PAID
    if approved:
        return ClaimStatus.APPROVED
    return ClaimStatus.PENDING


@dataclass(frozen=True)
class PolicyRecord:
    id: int
    holder: str
    premium: int
    coverage: int
    active: bool
    expiry: Optional[int] = None

    @property
    def is_empty_slot(self) -> bool:
        return is_zero_address(self.holder)


@dataclass(frozen=True)
class ClaimRecord:
    id: int
    policy_id: int
    claimant: str
    amount: int
    approved: bool
    paid: bool

    @property
    def is_empty_slot(self) -> bool:
        return is_zero_address(self.claimant)

    @property
    def status(self) -> ClaimStatus:
        return derive_claim_status(self.approved, self.paid)


def _as_mapping(raw: Any, layout: Tuple[str, ...], kind: str) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) < len(layout):
            raise RecordDecodeError(
                f"{kind} record has {len(raw)} fields, expected {len(layout)}"
            )
        return dict(zip(layout, raw))
    raise RecordDecodeError(f"{kind} record has unsupported shape {type(raw).__name__}")


def _require(data: Mapping[str, Any], name: str, kind: str) -> Any:
    for key in _FIELD_ALIASES.get(name, (name,)):
        if key in data and data[key] is not None:
            return data[key]
    raise RecordDecodeError(f"{kind} record is missing required field '{name}'")


def _require_int(data: Mapping[str, Any], name: str, kind: str) -> int:
    value = _require(data, name, kind)
    if isinstance(value, bool) or not isinstance(value, int):
        raise RecordDecodeError(f"{kind} field '{name}' must be an integer")
    if value < 0:
        raise RecordDecodeError(f"{kind} field '{name}' cannot be negative")
    return value


def _require_bool(data: Mapping[str, Any], name: str, kind: str) -> bool:
    value = _require(data, name, kind)
    if not isinstance(value, bool):
        raise RecordDecodeError(f"{kind} field '{name}' must be a boolean")
    return value


def _require_address(data: Mapping[str, Any], name: str, kind: str) -> str:
    value = _require(data, name, kind)
    if not isinstance(value, str) or not value.strip():
        raise RecordDecodeError(f"{kind} field '{name}' must be an address string")
    return value.strip()


def decode_policy(raw: Any) -> PolicyRecord:
    """
    Decode a `policies(id)` return value.

    Raises:
        RecordDecodeError: If a required field is missing or mistyped.
    """
    data = _as_mapping(raw, POLICY_FIELDS, "policy")
    expiry = data.get("expiry")
    return PolicyRecord(
        id=_require_int(data, "id", "policy"),
        holder=_require_address(data, "holder", "policy"),
        premium=_require_int(data, "premium", "policy"),
        coverage=_require_int(data, "coverage", "policy"),
        active=_require_bool(data, "active", "policy"),
        expiry=expiry if isinstance(expiry, int) and not isinstance(expiry, bool) else None,
    )


def decode_claim(raw: Any) -> ClaimRecord:
    """
    Decode a `claims(id)` return value.

    Raises:
        RecordDecodeError: If a required field is missing or mistyped.
    """
    data = _as_mapping(raw, CLAIM_FIELDS, "claim")
    return ClaimRecord(
        id=_require_int(data, "id", "claim"),
        policy_id=_require_int(data, "policyId", "claim"),
        claimant=_require_address(data, "claimant", "claim"),
        amount=_require_int(data, "amount", "claim"),
        approved=_require_bool(data, "approved", "claim"),
        paid=_require_bool(data, "paid", "claim"),
    )


def read_policy_reference(raw: Any) -> Optional[int]:
    """
    Best-effort policy id of a claim snapshot, for summary text only.

    Returns None instead of raising so a missing field degrades the message
    rather than the transaction.
    """
    try:
        data = _as_mapping(raw, CLAIM_FIELDS, "claim")
        return _require_int(data, "policyId", "claim")
    except RecordDecodeError:
        return None


__all__ = [
    "POLICY_FIELDS",
    "CLAIM_FIELDS",
    "ClaimStatus",
    "derive_claim_status",
    "PolicyRecord",
    "ClaimRecord",
    "decode_policy",
    "decode_claim",
    "read_policy_reference",
]
