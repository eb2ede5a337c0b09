"""
API routes for the insurer (administrator) role.

Every command here except `/connect` is gated on the admin check performed
by `/connect`.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from insurance_client.routes.common import (
    connection_response,
    get_dispatcher,
    listing_status_code,
    tx_response,
)
from insurance_client.schemas.insurance_schema import (
    ClaimView,
    ConnectionResponse,
    FundRequest,
    IssuePolicyRequest,
    TxOutcomeResponse,
)
from insurance_client.services.command_dispatcher import CommandDispatcher, ListingStatus


router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/connect", response_model=ConnectionResponse)
def connect_admin(response: Response, dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> ConnectionResponse:
    """
    Connect the wallet and check it against the contract's authority.

    Returns 403 with distinct `authorization` values for a wrong account
    (`access_denied`) and a wrong contract (`contract_incompatible`).
    """
    return connection_response(dispatcher.dispatch("connect_admin"), response)


@router.post("/policies", response_model=TxOutcomeResponse)
def issue_policy(
    payload: IssuePolicyRequest,
    response: Response,
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> TxOutcomeResponse:
    outcome = dispatcher.dispatch(
        "issue_policy",
        holder=payload.holder,
        premium=payload.premium,
        coverage=payload.coverage,
        duration=payload.duration,
    )
    return tx_response(outcome, response)


@router.post("/claims/{claim_id}/approve", response_model=TxOutcomeResponse)
def approve_claim(claim_id: str, response: Response, dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> TxOutcomeResponse:
    return tx_response(dispatcher.dispatch("approve_claim", claim_id=claim_id), response)


@router.post("/claims/{claim_id}/pay", response_model=TxOutcomeResponse)
def pay_claim(claim_id: str, response: Response, dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> TxOutcomeResponse:
    return tx_response(dispatcher.dispatch("pay_claim", claim_id=claim_id), response)


@router.post("/fund", response_model=TxOutcomeResponse)
def fund_contract(
    payload: FundRequest,
    response: Response,
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> TxOutcomeResponse:
    """
    Send value to the contract's funding method.
    """
    return tx_response(dispatcher.dispatch("fund", amount=payload.amount), response)


@router.get("/claims", response_model=List[ClaimView])
def submitted_claims(dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> List[ClaimView]:
    """
    Every submitted claim, regardless of holder.

    Returns 403 unless the session passed the admin check.
    """
    outcome = dispatcher.dispatch("refresh_admin_claims")
    if outcome.status is not ListingStatus.OK:
        raise HTTPException(status_code=listing_status_code(outcome), detail=outcome.error)
    return outcome.claims
