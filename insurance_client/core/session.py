"""
The connection state shared by every component.

One `Session` is created by the application and handed to each service call;
no service keeps its own copy of the identity or contract handle. Only
`IdentityResolver.connect` writes the identity/contract pair; a failed
connection attempt clears it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from insurance_client.core.errors import NotConnected
from insurance_client.core.identity import AuthorizationResult, Identity


DISCONNECTED_LABEL = "Connect Wallet"


@dataclass
class Session:
    """
    Identity and contract handle for one operator.

    Attributes:
        wallet: Wallet provider exposing `request_accounts()`, or None when no
            provider is configured.
        contract_factory: Builds a contract handle from the wallet once an
            account has been granted.
        identity: Connected account, None while disconnected.
        contract: Contract handle bound at connection time.
        authorization: Result of the last admin probe, if any.
        connection_label: Short state text for the connect control.
    """

    wallet: Optional[Any]
    contract_factory: Callable[[Any], Any]
    identity: Optional[Identity] = None
    contract: Optional[Any] = None
    authorization: Optional[AuthorizationResult] = None
    connection_label: str = DISCONNECTED_LABEL

    @property
    def is_connected(self) -> bool:
        return self.identity is not None and self.contract is not None

    @property
    def is_admin(self) -> bool:
        return self.is_connected and self.authorization is not None and self.authorization.authorized

    def bind(self, identity: Identity, contract: Any) -> None:
        self.identity = identity
        self.contract = contract
        self.authorization = None

    def clear(self) -> None:
        """Drop the identity, contract handle and admin result."""
        self.identity = None
        self.contract = None
        self.authorization = None

    def require_connection(self) -> Tuple[Identity, Any]:
        """
        Return the bound identity and contract.

        Raises:
            NotConnected: If no wallet has been connected yet.
        """
        if self.identity is None or self.contract is None:
            raise NotConnected("Please connect your wallet first.")
        return self.identity, self.contract


__all__ = ["Session", "DISCONNECTED_LABEL"]
