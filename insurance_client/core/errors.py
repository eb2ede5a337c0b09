"""
Error taxonomy for the insurance contract client.

Validation errors derive from ValueError so callers can treat them the same
way as any other rejected input. Connection and aggregation errors wrap the
underlying provider/contract failure in a message fit for the activity log.
"""
from __future__ import annotations


class ClientError(Exception):
    """Base class for every error raised by the client."""


class InvalidInput(ClientError, ValueError):
    """A required field is missing or malformed."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidAmount(InvalidInput):
    """A currency amount is not a well-formed non-negative decimal numeral."""


class ProviderUnavailable(ClientError):
    """No wallet provider is configured or it cannot be reached."""


class UserRejected(ClientError):
    """The account access request was declined."""


class ContractNotConfigured(ClientError):
    """No contract address is configured, so no contract handle can be built."""


class NotConnected(ClientError):
    """An action needs a connected wallet and none is bound to the session."""


class RecordDecodeError(ClientError):
    """A contract record is missing a required field or has the wrong shape."""


class AggregationFailed(ClientError):
    """
    A listing pass failed part-way.

    Partial results are always discarded; the flag is kept on the exception so
    callers can state it explicitly.
    """

    def __init__(self, message: str, *, partial_results_discarded: bool = True) -> None:
        super().__init__(message)
        self.partial_results_discarded = partial_results_discarded


class TransactionReverted(ClientError):
    """The transaction settled with a failed status."""


__all__ = [
    "ClientError",
    "InvalidInput",
    "InvalidAmount",
    "ProviderUnavailable",
    "UserRejected",
    "ContractNotConfigured",
    "NotConnected",
    "RecordDecodeError",
    "AggregationFailed",
    "TransactionReverted",
]
