"""
Shared helpers for the holder and admin routers.

Outcomes are plain dataclasses; these helpers turn them into response schemas
and pick the HTTP status that matches the outcome kind.
"""
from fastapi import Request, Response, status

from insurance_client.schemas.insurance_schema import ConnectionResponse, TxOutcomeResponse
from insurance_client.services.command_dispatcher import (
    CommandDispatcher,
    ConnectionOutcome,
    ConnectionStatus,
    ListingOutcome,
    ListingStatus,
)
from insurance_client.services.transaction_service import OutcomeStatus, TxOutcome


_TX_STATUS_CODES = {
    OutcomeStatus.CONFIRMED: status.HTTP_200_OK,
    # A reverted or failed transaction is still a completed command.
    OutcomeStatus.FAILED: status.HTTP_200_OK,
    OutcomeStatus.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    OutcomeStatus.NOT_CONNECTED: status.HTTP_409_CONFLICT,
    OutcomeStatus.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
}

_CONNECTION_STATUS_CODES = {
    ConnectionStatus.CONNECTED: status.HTTP_200_OK,
    ConnectionStatus.PROVIDER_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ConnectionStatus.USER_REJECTED: status.HTTP_403_FORBIDDEN,
    ConnectionStatus.MISCONFIGURED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ConnectionStatus.FAILED: status.HTTP_502_BAD_GATEWAY,
}

_LISTING_STATUS_CODES = {
    ListingStatus.OK: status.HTTP_200_OK,
    ListingStatus.NOT_CONNECTED: status.HTTP_409_CONFLICT,
    ListingStatus.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ListingStatus.FAILED: status.HTTP_502_BAD_GATEWAY,
}


def get_dispatcher(request: Request) -> CommandDispatcher:
    return request.app.state.dispatcher


def tx_response(outcome: TxOutcome, response: Response) -> TxOutcomeResponse:
    response.status_code = _TX_STATUS_CODES[outcome.status]
    return TxOutcomeResponse(
        operation=outcome.operation,
        status=outcome.status.value,
        summary=outcome.summary,
        fields=outcome.fields,
        reason=outcome.reason,
        source=outcome.source.value if outcome.source else None,
        tx_hash=outcome.tx_hash,
    )


def connection_response(outcome: ConnectionOutcome, response: Response) -> ConnectionResponse:
    code = _CONNECTION_STATUS_CODES[outcome.status]
    if outcome.authorization is not None and not outcome.authorization.authorized:
        code = status.HTTP_403_FORBIDDEN
    response.status_code = code
    return ConnectionResponse(
        connected=outcome.connected,
        account=outcome.identity.address if outcome.identity else None,
        label=outcome.label,
        authorization=outcome.authorization.status.value if outcome.authorization else None,
        message=outcome.message,
    )


def listing_status_code(outcome: ListingOutcome) -> int:
    return _LISTING_STATUS_CODES[outcome.status]
