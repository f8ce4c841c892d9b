"""Pydantic models for the HTTP service.

Amounts travel as decimal strings (Uint256) and field names are camelCase on
the wire, matching what off-chain consumers of the contracts expect.
"""

from typing import Any

from pydantic import BaseModel, Field

from flayer.models.pool import SwapKind
from flayer.models.types import Address, Uint256


class ShutdownResponse(BaseModel):
    """Shutdown record and derived state of a collection."""

    collection: Address
    state: str = Field(description="Derived lifecycle state")
    prevented: bool = False
    shutdown_votes: Uint256 = Field(default="0", alias="shutdownVotes")
    quorum_votes: Uint256 = Field(default="0", alias="quorumVotes")
    can_execute: bool = Field(default=False, alias="canExecute")
    collection_token: Address | None = Field(default=None, alias="collectionToken")
    sweeper_pool: Address | None = Field(default=None, alias="sweeperPool")
    available_claim: Uint256 = Field(default="0", alias="availableClaim")
    liquidation_complete: bool = Field(default=True, alias="liquidationComplete")
    pool_token_ids: list[int] = Field(default_factory=list, alias="poolTokenIds")

    model_config = {"populate_by_name": True}


class VoterResponse(BaseModel):
    collection: Address
    voter: Address
    votes: Uint256 = Field(description="Tokens escrowed as votes")


class PoolFeesResponse(BaseModel):
    """Undistributed fees and effective fee rate of a collection's pool."""

    collection: Address
    pool_id: str = Field(alias="poolId")
    native_amount: Uint256 = Field(alias="nativeAmount")
    token_amount: Uint256 = Field(alias="tokenAmount")
    fee: int = Field(description="Effective fee for a trader without exemption (1/100_000)")
    pool_fee: int | None = Field(default=None, alias="poolFee")
    default_fee: int = Field(alias="defaultFee")

    model_config = {"populate_by_name": True}


class BeneficiaryFeesResponse(BaseModel):
    beneficiary: Address
    amount: Uint256


class InternalFillRequest(BaseModel):
    """Pool state and trade to quote an internal fill for.

    The trade is taken to pay native and receive the collection token.
    """

    kind: SwapKind
    amount: Uint256
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")
    sqrt_price_limit_x96: Uint256 = Field(alias="sqrtPriceLimitX96")
    liquidity: Uint256
    inventory: Uint256 = Field(description="Collection-token fee inventory")
    fee: int = Field(default=0, ge=0, description="Engine fee (1/100_000)")

    model_config = {"populate_by_name": True}


class InternalFillResponse(BaseModel):
    native_in: Uint256 = Field(alias="nativeIn")
    token_out: Uint256 = Field(alias="tokenOut")
    residual: Uint256
    fee_amount: Uint256 = Field(alias="feeAmount")

    model_config = {"populate_by_name": True}


class EventEntry(BaseModel):
    """An emitted event with its ABI-encoded payload."""

    name: str
    signature: str
    fields: dict[str, Any]
    data: str = Field(description="0x-prefixed ABI encoding of the fields")


class EventsResponse(BaseModel):
    events: list[EventEntry] = Field(default_factory=list)
