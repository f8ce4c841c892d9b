"""API endpoints for the Flayer core.

Read-only views over a protocol instance plus a pure internal-fill quote.
"""

from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException

from flayer.amm.internal_swap import compute_internal_fill
from flayer.errors import FlayerError, PoolNotInitialized
from flayer.fees.distributor import compute_fee_amount
from flayer.models.pool import SwapParams
from flayer.models.types import Address, normalize_address
from flayer.models.wire import (
    BeneficiaryFeesResponse,
    EventEntry,
    EventsResponse,
    InternalFillRequest,
    InternalFillResponse,
    PoolFeesResponse,
    ShutdownResponse,
    VoterResponse,
)
from flayer.protocol import FlayerProtocol, build_protocol

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_default_protocol() -> FlayerProtocol:
    return build_protocol()


def get_protocol() -> FlayerProtocol:
    """Dependency provider for the protocol instance.

    Override this in tests to inject a prepared protocol:
        app.dependency_overrides[get_protocol] = lambda: protocol

    Returns:
        The protocol instance to serve.
    """
    return get_default_protocol()


@router.get("/collections/{collection}/shutdown")
async def get_shutdown(
    collection: Address,
    protocol: FlayerProtocol = Depends(get_protocol),
) -> ShutdownResponse:
    """Shutdown record, lifecycle state and sell-through status of a collection."""
    collection = normalize_address(collection)
    shutdown = protocol.shutdown
    state = shutdown.state(collection)
    params = shutdown.collection_params(collection)
    response = ShutdownResponse(
        collection=collection,
        state=state.value,
        prevented=shutdown.is_prevented(collection),
    )
    if params is None:
        return response

    return response.model_copy(
        update={
            "shutdown_votes": str(params.shutdown_votes),
            "quorum_votes": str(params.quorum_votes),
            "can_execute": params.can_execute,
            "collection_token": params.collection_token.address,
            "sweeper_pool": params.sweeper_pool,
            "available_claim": str(params.available_claim),
            "liquidation_complete": shutdown.collection_liquidation_complete(collection),
            "pool_token_ids": shutdown.pool_token_ids(collection),
        }
    )


@router.get("/collections/{collection}/voters/{voter}")
async def get_voter(
    collection: Address,
    voter: Address,
    protocol: FlayerProtocol = Depends(get_protocol),
) -> VoterResponse:
    """Tokens a voter has escrowed for a collection's shutdown."""
    collection, voter = normalize_address(collection), normalize_address(voter)
    votes = protocol.shutdown.shutdown_voters(collection, voter)
    return VoterResponse(collection=collection, voter=voter, votes=str(votes))


@router.get("/pools/{collection}/fees")
async def get_pool_fees(
    collection: Address,
    protocol: FlayerProtocol = Depends(get_protocol),
) -> PoolFeesResponse:
    """Undistributed fee inventory and fee rates of a collection's pool."""
    collection = normalize_address(collection)
    try:
        key = protocol.swaps.pool_key(collection)
    except PoolNotInitialized as err:
        raise HTTPException(status_code=404, detail=str(err)) from err

    fees = protocol.ledger.claimable_fees(key)
    return PoolFeesResponse(
        collection=collection,
        pool_id=key.pool_id,
        native_amount=str(fees.native_amount),
        token_amount=str(fees.token_amount),
        fee=protocol.registry.get_fee(key.pool_id),
        pool_fee=protocol.registry.pool_fee(key.pool_id),
        default_fee=protocol.registry.default_fee,
    )


@router.get("/beneficiaries/{beneficiary}/fees")
async def get_beneficiary_fees(
    beneficiary: Address,
    protocol: FlayerProtocol = Depends(get_protocol),
) -> BeneficiaryFeesResponse:
    """Claimable native balance of a fee beneficiary."""
    beneficiary = normalize_address(beneficiary)
    amount = protocol.ledger.beneficiary_fees(beneficiary)
    return BeneficiaryFeesResponse(beneficiary=beneficiary, amount=str(amount))


@router.post("/quote/internal-fill")
async def quote_internal_fill(request: InternalFillRequest) -> InternalFillResponse:
    """Compute the internal fill for a pool state and trade.

    Error Handling:
        - Invalid request schema: 422 Validation Error (Pydantic)
        - Trade rejected by the engine (zero amount, overflow, bad limit):
          422 with the engine's message
    """
    sqrt_price = int(request.sqrt_price_x96)
    limit = int(request.sqrt_price_limit_x96)
    try:
        params = SwapParams(
            zero_for_one=limit < sqrt_price,
            kind=request.kind,
            amount=int(request.amount),
            sqrt_price_limit_x96=limit,
        )
        fill = compute_internal_fill(
            params, int(request.inventory), sqrt_price, int(request.liquidity)
        )
        notional = fill.token_out if params.exact_input else fill.native_in
        fee_amount = compute_fee_amount(notional, request.fee)
    except (FlayerError, ArithmeticError) as err:
        logger.debug("internal_fill_quote_rejected", error=str(err))
        raise HTTPException(status_code=422, detail=str(err)) from err

    return InternalFillResponse(
        native_in=str(fill.native_in),
        token_out=str(fill.token_out),
        residual=str(fill.residual),
        fee_amount=str(fee_amount),
    )


@router.get("/events")
async def get_events(protocol: FlayerProtocol = Depends(get_protocol)) -> EventsResponse:
    """Every emitted event in order, with its ABI encoding."""
    entries = [
        EventEntry(
            name=type(event).__name__,
            signature=event.signature(),
            fields=event.model_dump(mode="json"),
            data="0x" + event.encode_data().hex(),
        )
        for event in protocol.runtime.events
    ]
    return EventsResponse(events=entries)
