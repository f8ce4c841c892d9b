"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_protocol, add_collection

    protocol = make_protocol()
    key = add_collection(protocol)
"""

from collections.abc import Sequence

from flayer.config import FeeConfig, ShutdownConfig
from flayer.models.pool import PoolKey, SwapKind, SwapParams
from flayer.protocol import FlayerProtocol, build_protocol
from flayer.runtime import Clock
from tests.helpers.constants import (
    DEEP_LIQUIDITY,
    DEPOSITOR,
    LIMIT_DOWN,
    LIMIT_UP,
    NFT,
    ONE_ETH,
    OWNER,
    PRICE_ONE,
    TOKEN,
)


def make_protocol(
    fee_config: FeeConfig | None = None,
    shutdown_config: ShutdownConfig | None = None,
    timestamp: int = 1_700_000_000,
) -> FlayerProtocol:
    """Create a protocol owned by OWNER with a fixed clock."""
    return build_protocol(
        owner=OWNER,
        fee_config=fee_config,
        shutdown_config=shutdown_config,
        clock=Clock(timestamp),
    )


def add_collection(
    protocol: FlayerProtocol,
    nft: str = NFT,
    token: str = TOKEN,
    sqrt_price_x96: int | None = PRICE_ONE,
    liquidity: int = DEEP_LIQUIDITY,
    market_reserves: int = 1_000 * ONE_ETH,
) -> PoolKey:
    """Register a collection and give its market pool reserves on both sides."""
    key = protocol.add_collection(
        nft, token, symbol="TEST", sqrt_price_x96=sqrt_price_x96, liquidity=liquidity
    )
    if sqrt_price_x96 is not None and market_reserves:
        protocol.native.mint(protocol.market.address, market_reserves)
        protocol.collection_token(nft).mint(protocol.market.address, market_reserves)
    return key


def seed_fees(
    protocol: FlayerProtocol,
    key: PoolKey,
    token_amount: int = 0,
    native_amount: int = 0,
    depositor: str = DEPOSITOR,
) -> None:
    """Deposit fees into the ledger the way the vault pays taxes."""
    token = protocol.ledger.token_of(key)
    if token_amount:
        token.mint(depositor, token_amount)
        token.approve(depositor, protocol.ledger.address, token_amount)
    if native_amount:
        protocol.native.mint(depositor, native_amount)
        protocol.native.approve(depositor, protocol.ledger.address, native_amount)
    protocol.ledger.deposit_fees(depositor, key, native_amount, token_amount)


def fund_trader(protocol: FlayerProtocol, key: PoolKey, trader: str, amount: int) -> None:
    """Give a trader both currencies and approve the ledger to pull them."""
    token = protocol.ledger.token_of(key)
    for asset in (protocol.native, token):
        asset.mint(trader, amount)
        asset.approve(trader, protocol.ledger.address, amount)


def buy_params(
    protocol: FlayerProtocol,
    key: PoolKey,
    amount: int,
    kind: SwapKind = SwapKind.EXACT_OUTPUT,
) -> SwapParams:
    """Trade paying native and receiving the collection token."""
    zero_for_one = key.native_is_zero(protocol.native.address)
    return SwapParams(
        zero_for_one=zero_for_one,
        kind=kind,
        amount=amount,
        sqrt_price_limit_x96=LIMIT_DOWN if zero_for_one else LIMIT_UP,
    )


def sell_params(
    protocol: FlayerProtocol,
    key: PoolKey,
    amount: int,
    kind: SwapKind = SwapKind.EXACT_INPUT,
) -> SwapParams:
    """Trade paying the collection token and receiving native."""
    zero_for_one = not key.native_is_zero(protocol.native.address)
    return SwapParams(
        zero_for_one=zero_for_one,
        kind=kind,
        amount=amount,
        sqrt_price_limit_x96=LIMIT_DOWN if zero_for_one else LIMIT_UP,
    )


def deposit_holders(
    protocol: FlayerProtocol,
    holders: Sequence[str],
    collection: str = NFT,
    first_token_id: int = 0,
) -> list[int]:
    """Mint one asset per holder and deposit it into the vault.

    Each holder ends with one whole collection token and has approved the
    shutdown engine to escrow it.

    Returns:
        The deposited asset IDs, one per holder
    """
    nft = protocol.nft(collection)
    token = protocol.vault.collection_token(collection)
    assert token is not None
    token_ids = []
    for offset, holder in enumerate(holders):
        token_id = first_token_id + offset
        nft.mint(holder, token_id)
        protocol.vault.deposit(holder, collection, [token_id])
        token.approve(holder, protocol.shutdown.address, 2**255)
        token_ids.append(token_id)
    return token_ids
