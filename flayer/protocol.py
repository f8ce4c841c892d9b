"""Composition root wiring the engines to their collaborators.

build_protocol() assembles the fee-redirection engine and the shutdown
engine over in-memory collaborators sharing one Runtime. The HTTP service,
the simulation script and the tests all start from here.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from flayer.amm.internal_swap import InternalSwapEngine
from flayer.amm.market import SingleRangeMarket
from flayer.collaborators.sweeper import SweeperPoolFactory
from flayer.collaborators.tokens import InMemoryNft, InMemoryToken
from flayer.collaborators.vault import InMemoryListings, InMemoryVault
from flayer.config import FeeConfig, ShutdownConfig
from flayer.constants import WETH
from flayer.fees.distributor import AmmFeeDistributor
from flayer.fees.ledger import FeeLedger
from flayer.fees.registry import FeeRegistry
from flayer.models.pool import PoolKey
from flayer.models.types import normalize_address
from flayer.runtime import Clock, Runtime
from flayer.shutdown.engine import CollectionShutdown

logger = structlog.get_logger()

# Deterministic simulation addresses
DEFAULT_OWNER = "0x" + "0f" * 20
HOOK_ADDRESS = "0x" + "f1" * 20
MARKET_ADDRESS = "0x" + "a1" * 20
VAULT_ADDRESS = "0x" + "b1" * 20
SHUTDOWN_ADDRESS = "0x" + "c1" * 20


@dataclass
class FlayerProtocol:
    """Every engine and collaborator of one protocol instance."""

    runtime: Runtime
    native: InMemoryToken
    market: SingleRangeMarket
    registry: FeeRegistry
    ledger: FeeLedger
    distributor: AmmFeeDistributor
    swaps: InternalSwapEngine
    vault: InMemoryVault
    listings: InMemoryListings
    protected_listings: InMemoryListings
    pool_factory: SweeperPoolFactory
    shutdown: CollectionShutdown

    @property
    def owner(self) -> str:
        return self.runtime.owner

    def add_collection(
        self,
        nft_address: str,
        token_address: str,
        symbol: str = "",
        denomination: int = 0,
        sqrt_price_x96: int | None = None,
        liquidity: int = 0,
    ) -> PoolKey:
        """Register a new collection with the vault, the ledger and the market.

        The market pool is only initialized when a price is given.
        """
        nft = InMemoryNft(nft_address, symbol=symbol)
        token = InMemoryToken(token_address, symbol=f"f{symbol}", denomination=denomination)
        self.vault.register_collection(nft, token)
        self.market.add_token(token)
        key = self.swaps.register_collection(self.owner, nft.address, token)
        if sqrt_price_x96 is not None:
            self.market.initialize(key, sqrt_price_x96, liquidity)
        logger.info("collection_added", collection=nft.address, token=token.address)
        return key

    def nft(self, collection: str) -> InMemoryNft:
        return self.vault.nft(collection)

    def collection_token(self, collection: str) -> InMemoryToken:
        return self.ledger.token_of(self.swaps.pool_key(collection))  # type: ignore[return-value]


def build_protocol(
    owner: str = DEFAULT_OWNER,
    fee_config: FeeConfig | None = None,
    shutdown_config: ShutdownConfig | None = None,
    clock: Clock | None = None,
) -> FlayerProtocol:
    """Build a protocol instance over fresh in-memory collaborators."""
    runtime = Runtime(normalize_address(owner, validate=True), clock=clock)
    native = InMemoryToken(WETH, symbol="WETH", denomination=0)
    market = SingleRangeMarket(runtime, MARKET_ADDRESS, {native.address: native})
    registry = FeeRegistry(runtime, fee_config)
    ledger = FeeLedger(runtime, HOOK_ADDRESS, native, market, fee_config)
    distributor = AmmFeeDistributor(runtime, ledger)
    swaps = InternalSwapEngine(runtime, ledger, registry, distributor, market)

    vault = InMemoryVault(VAULT_ADDRESS)
    listings = InMemoryListings()
    protected_listings = InMemoryListings()
    pool_factory = SweeperPoolFactory(runtime, native)
    shutdown = CollectionShutdown(
        runtime,
        SHUTDOWN_ADDRESS,
        vault,
        listings,
        protected_listings,
        pool_factory,
        native,
        shutdown_config,
    )
    vault.set_collection_shutdown(shutdown.address)
    runtime.register(vault, listings, protected_listings, pool_factory, market, native)

    return FlayerProtocol(
        runtime=runtime,
        native=native,
        market=market,
        registry=registry,
        ledger=ledger,
        distributor=distributor,
        swaps=swaps,
        vault=vault,
        listings=listings,
        protected_listings=protected_listings,
        pool_factory=pool_factory,
        shutdown=shutdown,
    )
