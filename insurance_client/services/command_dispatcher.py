"""
Single entry point for user actions.

Each action name maps to exactly one resolver, orchestrator or aggregator call
and returns a discriminated outcome value. Connection and listing errors are
caught here, recorded in the activity log and reflected in the session's
connection label; none of them propagate to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from insurance_client.core.activity_log import ActivityLog
from insurance_client.core.config import Settings
from insurance_client.core.errors import (
    AggregationFailed,
    ContractNotConfigured,
    NotConnected,
    ProviderUnavailable,
    UserRejected,
)
from insurance_client.core.identity import AuthorizationResult, AuthorizationStatus, Identity
from insurance_client.core.session import DISCONNECTED_LABEL, Session
from insurance_client.schemas.insurance_schema import ClaimView, PolicyView
from insurance_client.services.aggregation_service import RecordAggregator
from insurance_client.services.identity_service import IdentityResolver
from insurance_client.services.transaction_service import TransactionOrchestrator


logger = logging.getLogger(__name__)


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    USER_REJECTED = "user_rejected"
    MISCONFIGURED = "misconfigured"
    FAILED = "failed"


class ListingStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    NOT_CONNECTED = "not_connected"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class ConnectionOutcome:
    status: ConnectionStatus
    label: str
    message: str
    identity: Optional[Identity] = None
    authorization: Optional[AuthorizationResult] = None

    @property
    def connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED


@dataclass(frozen=True)
class ListingOutcome:
    status: ListingStatus
    policies: List[PolicyView] = field(default_factory=list)
    claims: List[ClaimView] = field(default_factory=list)
    error: Optional[str] = None


_ADMIN_LABELS = {
    AuthorizationStatus.ACCESS_DENIED: "Access Denied",
    AuthorizationStatus.CONTRACT_INCOMPATIBLE: "Invalid Contract",
}


class CommandDispatcher:
    """Routes named user actions to the client components."""

    def __init__(
        self,
        session: Session,
        activity_log: ActivityLog,
        settings: Optional[Settings] = None,
    ) -> None:
        self.session = session
        self.activity_log = activity_log
        self.settings = settings or Settings()
        self.resolver = IdentityResolver(self.settings.authority_accessors)
        self.orchestrator = TransactionOrchestrator(activity_log, self.settings)
        self.aggregator = RecordAggregator(self.settings)
        self._handlers: Dict[str, Callable[..., Any]] = {
            "connect": self.connect,
            "connect_admin": self.connect_admin,
            "issue_policy": lambda **kw: self.orchestrator.issue_policy(self.session, **kw),
            "approve_claim": lambda **kw: self.orchestrator.approve_claim(self.session, **kw),
            "pay_claim": lambda **kw: self.orchestrator.pay_claim(self.session, **kw),
            "fund": lambda **kw: self.orchestrator.fund(self.session, **kw),
            "pay_premium": lambda **kw: self.orchestrator.pay_premium(self.session, **kw),
            "submit_claim": lambda **kw: self.orchestrator.submit_claim(self.session, **kw),
            "list_policies": self.list_policies,
            "list_claims": self.list_claims,
            "refresh": self.refresh,
            "refresh_admin_claims": self.refresh_admin_claims,
        }

    @property
    def commands(self) -> List[str]:
        return sorted(self._handlers)

    def dispatch(self, command: str, **payload: Any) -> Any:
        """
        Run one named action.

        Raises:
            KeyError: If the command name is unknown.
        """
        handler = self._handlers.get(command)
        if handler is None:
            raise KeyError(f"Unknown command: {command}")
        return handler(**payload)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------
    def connect(self) -> ConnectionOutcome:
        """Connect as a policyholder."""
        outcome = self._connect()
        if outcome is not None:
            return outcome

        identity = self.session.identity
        self.session.connection_label = "Connected"
        message = "Wallet connected successfully!"
        self.activity_log.success(message)
        return ConnectionOutcome(
            status=ConnectionStatus.CONNECTED,
            label=self.session.connection_label,
            message=message,
            identity=identity,
        )

    def connect_admin(self) -> ConnectionOutcome:
        """Connect and probe the contract for insurer rights."""
        outcome = self._connect()
        if outcome is not None:
            return outcome

        identity = self.session.identity
        result = self.resolver.authorize_admin(self.session, identity)
        if self.session.authorization is not result:
            message = "Account changed while checking admin rights; connect again."
            self.activity_log.error(message)
            return ConnectionOutcome(
                status=ConnectionStatus.FAILED,
                label=self.session.connection_label,
                message=message,
                identity=identity,
            )
        if result.authorized:
            self.session.connection_label = f"Admin: {identity.short}"
            self.activity_log.success(result.message)
        else:
            self.session.connection_label = _ADMIN_LABELS[result.status]
            self.activity_log.error(result.message)
        return ConnectionOutcome(
            status=ConnectionStatus.CONNECTED,
            label=self.session.connection_label,
            message=result.message,
            identity=identity,
            authorization=result,
        )

    def _connect(self) -> Optional[ConnectionOutcome]:
        self.session.connection_label = "Connecting..."
        try:
            self.resolver.connect(self.session)
        except ProviderUnavailable as exc:
            logger.warning("Wallet provider unavailable: %s", exc)
            return self._connection_failed(
                ConnectionStatus.PROVIDER_UNAVAILABLE,
                "Wallet Not Found",
                f"Wallet provider not found: {exc}",
            )
        except ContractNotConfigured as exc:
            logger.error("Contract not configured: %s", exc)
            return self._connection_failed(
                ConnectionStatus.MISCONFIGURED,
                "Contract Not Configured",
                f"No insurance contract is configured: {exc}",
            )
        except UserRejected as exc:
            return self._connection_failed(
                ConnectionStatus.USER_REJECTED,
                DISCONNECTED_LABEL,
                f"Wallet connection was declined: {exc}",
            )
        except Exception as exc:
            logger.exception("Connection error")
            return self._connection_failed(
                ConnectionStatus.FAILED,
                DISCONNECTED_LABEL,
                f"Failed to connect wallet: {exc}",
            )
        return None

    def _connection_failed(self, status: ConnectionStatus, label: str, message: str) -> ConnectionOutcome:
        self.session.clear()
        self.session.connection_label = label
        self.activity_log.error(message)
        return ConnectionOutcome(status=status, label=label, message=message)

    # ------------------------------------------------------------------
    # Read-only passes
    # ------------------------------------------------------------------
    def refresh(self, owner: Optional[str] = None) -> ListingOutcome:
        """Re-read the caller's policies and claims."""
        if not self.session.is_connected:
            self.activity_log.error("Please connect your wallet first.")
            return ListingOutcome(status=ListingStatus.NOT_CONNECTED, error="Please connect your wallet first.")

        self.activity_log.record("Fetching latest policies and claims...")
        try:
            policies = self.aggregator.list_policies(self.session, owner).to_list()
            claims = self.aggregator.list_claims(self.session, owner).to_list()
        except (AggregationFailed, NotConnected) as exc:
            message = f"Error fetching data: {exc}"
            self.activity_log.error(message)
            return ListingOutcome(status=ListingStatus.FAILED, error=str(exc))

        self.activity_log.success("Policies and Claims refreshed successfully.")
        return ListingOutcome(status=ListingStatus.OK, policies=policies, claims=claims)

    def list_policies(self, owner: Optional[str] = None) -> ListingOutcome:
        try:
            policies = self.aggregator.list_policies(self.session, owner).to_list()
        except (AggregationFailed, NotConnected) as exc:
            return self._listing_failed(exc)
        return ListingOutcome(status=ListingStatus.OK, policies=policies)

    def list_claims(self, owner: Optional[str] = None) -> ListingOutcome:
        try:
            claims = self.aggregator.list_claims(self.session, owner).to_list()
        except (AggregationFailed, NotConnected) as exc:
            return self._listing_failed(exc)
        return ListingOutcome(status=ListingStatus.OK, claims=claims)

    def _listing_failed(self, exc: Exception) -> ListingOutcome:
        self.activity_log.error(str(exc))
        status = ListingStatus.NOT_CONNECTED if isinstance(exc, NotConnected) else ListingStatus.FAILED
        return ListingOutcome(status=status, error=str(exc))

    def refresh_admin_claims(self) -> ListingOutcome:
        """Re-read every submitted claim for the insurer's table; admin only."""
        if not self.session.is_connected:
            self.activity_log.error("Please connect wallet first.")
            return ListingOutcome(status=ListingStatus.NOT_CONNECTED, error="Please connect wallet first.")
        if not self.session.is_admin:
            authorization = self.session.authorization
            message = (
                authorization.message
                if authorization is not None
                else "Connect as the insurer account to view submitted claims."
            )
            self.activity_log.error(message)
            return ListingOutcome(status=ListingStatus.UNAUTHORIZED, error=message)

        self.activity_log.record("Refreshing submitted claims...")
        try:
            claims = self.aggregator.list_all_claims(self.session).to_list()
        except (AggregationFailed, NotConnected) as exc:
            self.activity_log.error(str(exc))
            return ListingOutcome(status=ListingStatus.FAILED, error=str(exc))

        self.activity_log.success("Claims refreshed successfully!")
        return ListingOutcome(status=ListingStatus.OK, claims=claims)


__all__ = [
    "ConnectionStatus",
    "ListingStatus",
    "ConnectionOutcome",
    "ListingOutcome",
    "CommandDispatcher",
]
