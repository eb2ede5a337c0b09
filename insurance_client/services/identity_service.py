"""
Wallet connection and admin authorization.

Deployed insurance contracts expose their authority under one of two
conventional accessor names. The probe tries the primary name, then the
secondary one, and only reports the contract as incompatible when neither can
be read. A readable authority that differs from the connected account is an
access denial, which is reported separately.
"""
from __future__ import annotations

import logging
from typing import Sequence, Tuple

from insurance_client.core.config import DEFAULT_AUTHORITY_ACCESSORS
from insurance_client.core.errors import ProviderUnavailable, UserRejected
from insurance_client.core.identity import (
    AuthorizationResult,
    AuthorizationStatus,
    Identity,
)
from insurance_client.core.session import Session


logger = logging.getLogger(__name__)


class IdentityResolver:
    """Connects the session's wallet and checks admin rights against the contract."""

    def __init__(self, authority_accessors: Tuple[str, str] = DEFAULT_AUTHORITY_ACCESSORS) -> None:
        if len(authority_accessors) != 2:
            raise ValueError("authority_accessors must name a primary and a secondary accessor")
        self.authority_accessors = tuple(authority_accessors)

    def connect(self, session: Session) -> Identity:
        """
        Request account access and bind the first account to the session.

        Args:
            session: The application's session; its identity and contract
                handle are replaced on success.

        Returns:
            The connected identity.

        Raises:
            ProviderUnavailable: If no wallet provider is configured or it
                cannot be reached.
            UserRejected: If the request is declined or yields no account.
            ContractNotConfigured: If no contract address is configured.
        """
        if session.wallet is None:
            raise ProviderUnavailable("No wallet provider is configured")

        accounts: Sequence[str] = session.wallet.request_accounts()
        if not accounts:
            raise UserRejected("Wallet returned no accounts")

        identity = Identity(accounts[0])
        contract = session.contract_factory(session.wallet)
        session.bind(identity, contract)
        logger.info("Connected account %s", identity.address)
        return identity

    def read_authority(self, contract) -> Tuple[str, str] | None:
        """
        Read the authority address, trying each accessor in order.

        Returns:
            `(accessor_name, address)` for the first accessor that answers with
            an address, or None if none does.
        """
        for accessor in self.authority_accessors:
            try:
                authority = contract.call(accessor)
            except Exception as exc:
                logger.info("Authority accessor '%s' unavailable: %s", accessor, exc)
                continue
            if isinstance(authority, str) and authority.strip():
                return accessor, authority
            logger.info("Authority accessor '%s' returned %r", accessor, authority)
        return None

    def authorize_admin(self, session: Session, identity: Identity) -> AuthorizationResult:
        """
        Compare the contract's authority with `identity`.

        The result is also stored on the session so admin commands can be
        gated on it, but only while the session still holds `identity` and the
        contract handle that was read. A reconnect that lands during the read
        leaves the new binding without admin rights.
        """
        _, contract = session.require_connection()
        primary, secondary = self.authority_accessors

        found = self.read_authority(contract)
        if found is None:
            result = AuthorizationResult(
                status=AuthorizationStatus.CONTRACT_INCOMPATIBLE,
                message=(
                    f"Contract missing '{primary}' or '{secondary}' method; "
                    "check the configured contract address."
                ),
            )
        else:
            accessor, authority = found
            logger.debug("Authority from '%s': %s", accessor, authority)
            if identity.matches(authority):
                result = AuthorizationResult(
                    status=AuthorizationStatus.AUTHORIZED,
                    message="Admin connected successfully!",
                    authority=authority,
                    accessor=accessor,
                )
            else:
                result = AuthorizationResult(
                    status=AuthorizationStatus.ACCESS_DENIED,
                    message=(
                        f"Access denied: {identity.short} is not the {accessor} account; "
                        "switch to the authority account."
                    ),
                    authority=authority,
                    accessor=accessor,
                )

        if session.identity != identity or session.contract is not contract:
            logger.warning(
                "Session changed while authorizing %s; admin result not stored",
                identity.address,
            )
            return result
        session.authorization = result
        return result


__all__ = ["IdentityResolver"]
