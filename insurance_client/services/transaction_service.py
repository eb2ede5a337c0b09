"""
Submission and reconciliation of state-changing contract calls.

Each operation follows the same path:
  1. optional pre-call snapshot (taken before the write, since the write may
     move the very counter being read),
  2. the write itself, from the caller's account,
  3. waiting for settlement,
  4. reconciliation: the operation's event when the receipt carries one,
     otherwise a result synthesized from the snapshot and the request,
  5. an activity-log entry describing the outcome.

The synthesized result can be stale if another write lands between the
snapshot and settlement; that window is accepted and not retried. Failures at
any step become a `failed` outcome and are never raised to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from insurance_client.core.activity_log import ActivityLog
from insurance_client.core.config import Settings
from insurance_client.core.errors import InvalidInput, NotConnected
from insurance_client.core.identity import Identity
from insurance_client.core.records import read_policy_reference
from insurance_client.core.session import Session
from insurance_client.core.units import from_base_units, to_base_units
from insurance_client.core.validation import (
    parse_address,
    parse_positive_int,
    parse_record_id,
    require_fields,
)


logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"
    INVALID_INPUT = "invalid_input"
    NOT_CONNECTED = "not_connected"
    UNAUTHORIZED = "unauthorized"


class ReconciliationSource(str, Enum):
    EVENT = "event"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class TxOutcome:
    """Discriminated result of one command; `status` says which fields apply."""

    operation: str
    status: OutcomeStatus
    summary: str
    fields: Dict[str, Any] = field(default_factory=dict)
    reason: Optional[str] = None
    source: Optional[ReconciliationSource] = None
    tx_hash: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.CONFIRMED


Snapshot = Callable[[Any, Dict[str, Any]], Any]
Reconcile = Callable[[Dict[str, Any], Any, Dict[str, Any]], Dict[str, Any]]
Fallback = Callable[[Any, Dict[str, Any]], Dict[str, Any]]
Describe = Callable[[Dict[str, Any]], str]


@dataclass(frozen=True)
class Operation:
    """How one contract write is snapshotted, reconciled and described."""

    name: str
    method: str
    failure_label: str
    describe: Describe
    fallback: Fallback
    event: Optional[str] = None
    from_event: Optional[Reconcile] = None
    snapshot: Optional[Snapshot] = None


def _display_id(value: Any) -> str:
    return "unknown" if value is None else str(value)


def _event_int(event: Dict[str, Any], key: str, default: Any = None) -> Any:
    value = event.get(key)
    if value is None:
        return default
    return int(value)


class TransactionOrchestrator:
    """
    Runs policyholder and insurer commands against the session's contract.

    The orchestrator owns no connection state: every call reads the identity
    and contract handle from the session it is given.
    """

    def __init__(self, activity_log: ActivityLog, settings: Optional[Settings] = None) -> None:
        self.activity_log = activity_log
        self.settings = settings or Settings()

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------
    def _plain(self, base_units: int) -> str:
        return from_base_units(int(base_units), self.settings.base_unit_decimals)

    def _to_base_units(self, value: str, field_name: str) -> int:
        return to_base_units(value, self.settings.base_unit_decimals, field=field_name)

    # ------------------------------------------------------------------
    # Generic path
    # ------------------------------------------------------------------
    def submit(
        self,
        session: Session,
        operation: Operation,
        args: Tuple[Any, ...],
        caller: Identity,
        *,
        value: Optional[int] = None,
        gas: Optional[int] = None,
        request: Optional[Dict[str, Any]] = None,
    ) -> TxOutcome:
        """
        Submit `operation` with already-validated `args` and reconcile it.

        Args:
            session: Session providing the contract handle.
            operation: Operation definition.
            args: Positional contract arguments, in base units.
            caller: Sending account.
            value: Value to attach for payable calls, in base units.
            gas: Optional gas limit.
            request: Validated request values used for the fallback result.

        Returns:
            A confirmed or failed outcome. Never raises for contract or
            transport errors.
        """
        request = dict(request or {})
        contract = session.contract
        try:
            snapshot = operation.snapshot(contract, request) if operation.snapshot else None
            settlement = contract.transact(
                operation.method,
                *args,
                sender=caller.address,
                value=value,
                gas=gas,
            )
        except Exception as exc:
            reason = str(exc) or exc.__class__.__name__
            logger.warning(
                "%s failed: %s",
                operation.method,
                reason,
                extra={"operation": operation.name, "sender": caller.address},
            )
            self.activity_log.error(f"{operation.failure_label}: {reason}")
            return TxOutcome(
                operation=operation.name,
                status=OutcomeStatus.FAILED,
                summary=f"{operation.failure_label}: {reason}",
                reason=reason,
            )

        fields: Optional[Dict[str, Any]] = None
        source = ReconciliationSource.FALLBACK
        event = settlement.event(operation.event) if operation.event else None
        if event is not None and operation.from_event is not None:
            try:
                fields = operation.from_event(event, snapshot, request)
                source = ReconciliationSource.EVENT
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Could not read %s event, using fallback: %s", operation.event, exc)
        if fields is None:
            fields = operation.fallback(snapshot, request)

        summary = operation.describe(fields)
        self.activity_log.success(summary)
        return TxOutcome(
            operation=operation.name,
            status=OutcomeStatus.CONFIRMED,
            summary=summary,
            fields=fields,
            source=source,
            tx_hash=settlement.tx_hash,
        )

    def _reject(self, operation: str, status: OutcomeStatus, message: str) -> TxOutcome:
        self.activity_log.error(message)
        return TxOutcome(operation=operation, status=status, summary=message, reason=message)

    def _caller(self, session: Session, operation: str, *, admin: bool) -> Identity | TxOutcome:
        try:
            identity, _ = session.require_connection()
        except NotConnected as exc:
            return self._reject(operation, OutcomeStatus.NOT_CONNECTED, str(exc))
        if admin and not session.is_admin:
            authorization = session.authorization
            message = (
                authorization.message
                if authorization is not None and not authorization.authorized
                else "Connect as the insurer account before running admin actions."
            )
            return self._reject(operation, OutcomeStatus.UNAUTHORIZED, message)
        return identity

    def _invalid(self, operation: str, exc: InvalidInput) -> TxOutcome:
        logger.warning("Rejected %s input: %s", operation, exc, extra={"field": exc.field})
        return self._reject(operation, OutcomeStatus.INVALID_INPUT, str(exc))

    # ------------------------------------------------------------------
    # Insurer commands
    # ------------------------------------------------------------------
    def issue_policy(
        self,
        session: Session,
        holder: str,
        premium: str,
        coverage: str,
        duration: Any,
    ) -> TxOutcome:
        caller = self._caller(session, "issue_policy", admin=True)
        if isinstance(caller, TxOutcome):
            return caller
        try:
            require_fields({"holder": holder, "premium": premium, "coverage": coverage, "duration": duration})
            holder_address = parse_address(holder, "holder")
            premium_units = self._to_base_units(premium, "premium")
            coverage_units = self._to_base_units(coverage, "coverage")
            duration_units = parse_positive_int(duration, "duration")
        except InvalidInput as exc:
            return self._invalid("issue_policy", exc)

        request = {
            "holder": holder_address,
            "premium": premium_units,
            "coverage": coverage_units,
            "duration": duration_units,
        }

        def snapshot(contract: Any, _request: Dict[str, Any]) -> int:
            return int(contract.call("nextPolicyId"))

        def from_event(event: Dict[str, Any], _snapshot: Any, req: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "policy_id": int(event["policyId"]),
                "holder": event.get("holder") or req["holder"],
                "premium": self._plain(_event_int(event, "premium", req["premium"])),
                "coverage": self._plain(_event_int(event, "coverage", req["coverage"])),
                "duration": req["duration"],
            }

        def fallback(next_id: Any, req: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "policy_id": next_id,
                "holder": req["holder"],
                "premium": self._plain(req["premium"]),
                "coverage": self._plain(req["coverage"]),
                "duration": req["duration"],
            }

        def describe(fields: Dict[str, Any]) -> str:
            symbol = self.settings.currency_symbol
            return (
                f"Policy #{_display_id(fields['policy_id'])} issued for {fields['holder']} | "
                f"Premium: {fields['premium']} {symbol} | Coverage: {fields['coverage']} {symbol}"
            )

        operation = Operation(
            name="issue_policy",
            method="issuePolicy",
            failure_label="Error issuing policy",
            event="PolicyIssued",
            snapshot=snapshot,
            from_event=from_event,
            fallback=fallback,
            describe=describe,
        )
        return self.submit(
            session,
            operation,
            (holder_address, premium_units, coverage_units, duration_units),
            caller,
            request=request,
        )

    def approve_claim(self, session: Session, claim_id: Any) -> TxOutcome:
        return self._settle_claim(
            session,
            claim_id,
            name="approve_claim",
            method="approveClaim",
            event="ClaimApproved",
            failure_label="Approval failed",
            verb="approved for",
        )

    def pay_claim(self, session: Session, claim_id: Any) -> TxOutcome:
        return self._settle_claim(
            session,
            claim_id,
            name="pay_claim",
            method="payClaim",
            event="ClaimPaid",
            failure_label="Payment failed",
            verb="paid successfully for",
        )

    def _settle_claim(
        self,
        session: Session,
        claim_id: Any,
        *,
        name: str,
        method: str,
        event: str,
        failure_label: str,
        verb: str,
    ) -> TxOutcome:
        caller = self._caller(session, name, admin=True)
        if isinstance(caller, TxOutcome):
            return caller
        try:
            require_fields({"claim_id": claim_id}, "Enter claim ID.")
            claim_number = parse_record_id(claim_id, "claim_id")
        except InvalidInput as exc:
            return self._invalid(name, exc)

        def snapshot(contract: Any, _request: Dict[str, Any]) -> Optional[int]:
            return read_policy_reference(contract.call("claims", claim_number))

        def from_event(evt: Dict[str, Any], policy_id: Any, _req: Dict[str, Any]) -> Dict[str, Any]:
            fields = {
                "claim_id": int(evt["claimId"]),
                "policy_id": _event_int(evt, "policyId", policy_id),
            }
            if evt.get("amount") is not None:
                fields["amount"] = self._plain(int(evt["amount"]))
            return fields

        def fallback(policy_id: Any, _req: Dict[str, Any]) -> Dict[str, Any]:
            return {"claim_id": claim_number, "policy_id": policy_id}

        def describe(fields: Dict[str, Any]) -> str:
            text = f"Claim #{fields['claim_id']} {verb} Policy #{_display_id(fields['policy_id'])}"
            if "amount" in fields:
                text += f" ({fields['amount']} {self.settings.currency_symbol})"
            return text

        operation = Operation(
            name=name,
            method=method,
            failure_label=failure_label,
            event=event,
            snapshot=snapshot,
            from_event=from_event,
            fallback=fallback,
            describe=describe,
        )
        return self.submit(session, operation, (claim_number,), caller, request={"claim_id": claim_number})

    def fund(self, session: Session, amount: str) -> TxOutcome:
        caller = self._caller(session, "fund", admin=True)
        if isinstance(caller, TxOutcome):
            return caller
        try:
            require_fields({"amount": amount}, "Enter amount to fund.")
            amount_units = self._to_base_units(amount, "amount")
        except InvalidInput as exc:
            return self._invalid("fund", exc)

        operation = Operation(
            name="fund",
            method=self.settings.fund_method,
            failure_label="Funding failed",
            fallback=lambda _snapshot, req: {"amount": self._plain(req["amount"])},
            describe=lambda fields: f"Contract funded with {fields['amount']} {self.settings.currency_symbol}",
        )
        return self.submit(session, operation, (), caller, value=amount_units, request={"amount": amount_units})

    # ------------------------------------------------------------------
    # Policyholder commands
    # ------------------------------------------------------------------
    def pay_premium(self, session: Session, policy_id: Any, amount: str) -> TxOutcome:
        caller = self._caller(session, "pay_premium", admin=False)
        if isinstance(caller, TxOutcome):
            return caller
        try:
            require_fields({"policy_id": policy_id, "amount": amount})
            policy_number = parse_record_id(policy_id, "policy_id")
            amount_units = self._to_base_units(amount, "amount")
        except InvalidInput as exc:
            return self._invalid("pay_premium", exc)

        def from_event(event: Dict[str, Any], _snapshot: Any, req: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "policy_id": int(event["policyId"]),
                "amount": self._plain(_event_int(event, "amount", req["amount"])),
            }

        operation = Operation(
            name="pay_premium",
            method="payPremium",
            failure_label="Error paying premium",
            event="PremiumPaid",
            from_event=from_event,
            fallback=lambda _snapshot, req: {"policy_id": req["policy_id"], "amount": self._plain(req["amount"])},
            describe=lambda fields: (
                f"Premium paid for Policy #{fields['policy_id']} | "
                f"Amount: {fields['amount']} {self.settings.currency_symbol}"
            ),
        )
        return self.submit(
            session,
            operation,
            (policy_number,),
            caller,
            value=amount_units,
            gas=self.settings.holder_gas_limit,
            request={"policy_id": policy_number, "amount": amount_units},
        )

    def submit_claim(self, session: Session, policy_id: Any, amount: str) -> TxOutcome:
        caller = self._caller(session, "submit_claim", admin=False)
        if isinstance(caller, TxOutcome):
            return caller
        try:
            require_fields({"policy_id": policy_id, "amount": amount}, "Please enter claim details.")
            policy_number = parse_record_id(policy_id, "policy_id")
            amount_units = self._to_base_units(amount, "amount")
        except InvalidInput as exc:
            return self._invalid("submit_claim", exc)

        def snapshot(contract: Any, _request: Dict[str, Any]) -> int:
            return int(contract.call("nextClaimId"))

        def from_event(event: Dict[str, Any], next_id: Any, req: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "claim_id": _event_int(event, "claimId", next_id),
                "policy_id": _event_int(event, "policyId", req["policy_id"]),
                "amount": self._plain(_event_int(event, "amount", req["amount"])),
            }

        def fallback(next_id: Any, req: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "claim_id": next_id,
                "policy_id": req["policy_id"],
                "amount": self._plain(req["amount"]),
            }

        operation = Operation(
            name="submit_claim",
            method="submitClaim",
            failure_label="Error submitting claim",
            event="ClaimSubmitted",
            snapshot=snapshot,
            from_event=from_event,
            fallback=fallback,
            describe=lambda fields: (
                f"Claim #{_display_id(fields['claim_id'])} submitted for Policy #{fields['policy_id']} "
                f"({fields['amount']} {self.settings.currency_symbol})"
            ),
        )
        return self.submit(
            session,
            operation,
            (policy_number, amount_units),
            caller,
            gas=self.settings.holder_gas_limit,
            request={"policy_id": policy_number, "amount": amount_units},
        )


__all__ = [
    "OutcomeStatus",
    "ReconciliationSource",
    "TxOutcome",
    "Operation",
    "TransactionOrchestrator",
]
