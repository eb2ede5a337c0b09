"""
API routes for the policyholder role.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import StreamingResponse

from insurance_client.routes.common import (
    connection_response,
    get_dispatcher,
    listing_status_code,
    tx_response,
)
from insurance_client.schemas.insurance_schema import (
    ClaimView,
    ConnectionResponse,
    PayPremiumRequest,
    PolicyView,
    RefreshResponse,
    SubmitClaimRequest,
    TxOutcomeResponse,
)
from insurance_client.services.command_dispatcher import CommandDispatcher, ListingOutcome, ListingStatus
from insurance_client.services.statement_service import build_statement_pdf


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/holder", tags=["policyholder"])


def _raise_for_listing(outcome: ListingOutcome) -> None:
    if outcome.status is not ListingStatus.OK:
        raise HTTPException(status_code=listing_status_code(outcome), detail=outcome.error)


@router.post("/connect", response_model=ConnectionResponse)
def connect_wallet(response: Response, dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> ConnectionResponse:
    """
    Request account access from the wallet provider.
    """
    return connection_response(dispatcher.dispatch("connect"), response)


@router.post("/premiums", response_model=TxOutcomeResponse)
def pay_premium(
    payload: PayPremiumRequest,
    response: Response,
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> TxOutcomeResponse:
    """
    Pay a premium for one of the caller's policies; the amount is attached as value.
    """
    outcome = dispatcher.dispatch("pay_premium", policy_id=payload.policy_id, amount=payload.amount)
    return tx_response(outcome, response)


@router.post("/claims", response_model=TxOutcomeResponse)
def submit_claim(
    payload: SubmitClaimRequest,
    response: Response,
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> TxOutcomeResponse:
    outcome = dispatcher.dispatch("submit_claim", policy_id=payload.policy_id, amount=payload.amount)
    return tx_response(outcome, response)


@router.get("/policies", response_model=List[PolicyView])
def my_policies(dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> List[PolicyView]:
    outcome = dispatcher.dispatch("list_policies")
    _raise_for_listing(outcome)
    return outcome.policies


@router.get("/claims", response_model=List[ClaimView])
def my_claims(dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> List[ClaimView]:
    """
    Claims filed against the caller's policies, with derived status.
    """
    outcome = dispatcher.dispatch("list_claims")
    _raise_for_listing(outcome)
    return outcome.claims


@router.post("/refresh", response_model=RefreshResponse)
def refresh(dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> RefreshResponse:
    """
    Re-read both listings from the contract in one pass.
    """
    outcome = dispatcher.dispatch("refresh")
    _raise_for_listing(outcome)
    return RefreshResponse(policies=outcome.policies, claims=outcome.claims)


@router.get("/statement")
def download_statement(dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> StreamingResponse:
    """
    Download a PDF statement of the caller's policies and claims.
    """
    outcome = dispatcher.dispatch("refresh")
    _raise_for_listing(outcome)

    account = dispatcher.session.identity.address
    try:
        pdf_bytes = build_statement_pdf(
            account,
            outcome.policies,
            outcome.claims,
            currency_symbol=dispatcher.settings.currency_symbol,
        )
    except Exception as exc:
        logger.exception("Error generating PDF statement", extra={"account": account})
        raise HTTPException(status_code=500, detail="Failed to generate PDF statement") from exc

    return StreamingResponse(
        iter([pdf_bytes]),
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=policy_statement.pdf"},
    )
