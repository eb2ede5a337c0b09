"""
Per-user views over the contract's policy and claim records.

Records live in sequential slots addressed by id. A listing reads the
next-id counter, walks the slots, drops unwritten ones (zero principal
address) and projects the rest into display views.

Whether the walk includes the slot at the counter itself is configurable:
the counter names the next id to be assigned, so an inclusive walk reads one
slot that is normally empty. Some contracts keep a placeholder there, so the
inclusive bound remains the default.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from insurance_client.core.config import Settings
from insurance_client.core.errors import AggregationFailed, NotConnected
from insurance_client.core.identity import Identity, addresses_equal
from insurance_client.core.records import (
    ClaimRecord,
    PolicyRecord,
    decode_claim,
    decode_policy,
)
from insurance_client.core.session import Session
from insurance_client.core.units import from_base_units
from insurance_client.schemas.insurance_schema import ClaimView, PolicyView


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Listing(Generic[T]):
    """
    A lazy, restartable, all-or-nothing sequence of views.

    Nothing is read until iteration starts. Every iteration re-reads the
    contract, and a failure anywhere raises `AggregationFailed` before the
    first element is produced.
    """

    def __init__(self, collect: Callable[[], List[T]]) -> None:
        self._collect = collect

    def __iter__(self) -> Iterator[T]:
        return iter(self._collect())

    def to_list(self) -> List[T]:
        return list(self._collect())


class RecordAggregator:
    """Builds policy and claim listings for a session's contract."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()

    # ------------------------------------------------------------------
    # Public listings
    # ------------------------------------------------------------------
    def list_policies(self, session: Session, owner: Identity | str | None = None) -> Listing[PolicyView]:
        """Policies whose holder is `owner` (the session identity by default)."""
        return Listing(lambda: self._guarded("policies", lambda: self._collect_policies(session, owner)))

    def list_claims(self, session: Session, owner: Identity | str | None = None) -> Listing[ClaimView]:
        """Claims filed against policies held by `owner`."""
        return Listing(lambda: self._guarded("claims", lambda: self._collect_claims(session, owner)))

    def list_all_claims(self, session: Session) -> Listing[ClaimView]:
        """Every written claim slot, for the insurer's review table."""
        return Listing(lambda: self._guarded("claims", lambda: self._collect_claims(session, None, everyone=True)))

    # ------------------------------------------------------------------
    # Collection passes
    # ------------------------------------------------------------------
    def _guarded(self, kind: str, collect: Callable[[], List[T]]) -> List[T]:
        try:
            return collect()
        except (AggregationFailed, NotConnected):
            raise
        except Exception as exc:
            logger.warning("Listing %s failed, discarding partial results: %s", kind, exc)
            raise AggregationFailed(
                f"Error loading {kind}: {exc}",
                partial_results_discarded=True,
            ) from exc

    def _slot_ids(self, counter: int) -> range:
        if self.settings.aggregation_inclusive_bound:
            return range(counter + 1)
        return range(counter)

    @staticmethod
    def _owner_address(session: Session, owner: Identity | str | None) -> str:
        identity, _ = session.require_connection()
        if owner is None:
            return identity.address
        if isinstance(owner, Identity):
            return owner.address
        return owner

    def _collect_policies(self, session: Session, owner: Identity | str | None) -> List[PolicyView]:
        owner_address = self._owner_address(session, owner)
        contract = session.contract
        counter = int(contract.call("nextPolicyId"))

        views: List[PolicyView] = []
        for slot in self._slot_ids(counter):
            record = decode_policy(contract.call("policies", slot))
            if record.is_empty_slot:
                continue
            if addresses_equal(record.holder, owner_address):
                views.append(self._policy_view(record))
        return views

    def _collect_claims(
        self,
        session: Session,
        owner: Identity | str | None,
        *,
        everyone: bool = False,
    ) -> List[ClaimView]:
        owner_address = None if everyone else self._owner_address(session, owner)
        if everyone:
            session.require_connection()
        contract = session.contract
        counter = int(contract.call("nextClaimId"))

        # Policies resolved during this pass only; never reused across passes.
        policies: Dict[int, PolicyRecord] = {}

        views: List[ClaimView] = []
        for slot in self._slot_ids(counter):
            claim = decode_claim(contract.call("claims", slot))
            if claim.is_empty_slot:
                continue
            if not everyone:
                policy = policies.get(claim.policy_id)
                if policy is None:
                    policy = decode_policy(contract.call("policies", claim.policy_id))
                    policies[claim.policy_id] = policy
                if policy.is_empty_slot:
                    logger.debug("Claim %s references unknown policy %s", claim.id, claim.policy_id)
                    continue
                if not addresses_equal(policy.holder, owner_address):
                    continue
            views.append(self._claim_view(claim))
        return views

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------
    def _format(self, value: int) -> str:
        return from_base_units(value, self.settings.base_unit_decimals)

    def _policy_view(self, record: PolicyRecord) -> PolicyView:
        return PolicyView(
            policy_id=record.id,
            holder=record.holder,
            premium=self._format(record.premium),
            coverage=self._format(record.coverage),
            active=record.active,
            expiry=record.expiry,
        )

    def _claim_view(self, record: ClaimRecord) -> ClaimView:
        return ClaimView(
            claim_id=record.id,
            policy_id=record.policy_id,
            claimant=record.claimant,
            amount=self._format(record.amount),
            approved=record.approved,
            paid=record.paid,
            status=record.status,
        )


__all__ = ["Listing", "RecordAggregator"]
