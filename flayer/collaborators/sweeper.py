"""In-memory liquidation (sweeper) pools.

A sweeper pool owns the assets of a shut-down collection and sells them one
at a time at a price that decays linearly from the start price to zero over
the pool's duration. Each sale remits the payment to the pool's asset
recipient as a plain value transfer.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from flayer.collaborators.base import NonFungibleCollection, ValueReceiver
from flayer.collaborators.tokens import InMemoryToken
from flayer.errors import StateError
from flayer.journal import StateHolder
from flayer.runtime import Runtime
from flayer.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class LinearDecayCurve:
    """Price = start_price * (duration - elapsed) / duration, floored at zero."""

    start_price: int
    duration: int
    start_time: int

    def price_at(self, timestamp: int) -> int:
        elapsed = max(0, timestamp - self.start_time)
        if elapsed >= self.duration:
            return 0
        return S.mul_div(self.start_price, self.duration - elapsed, self.duration).value


class SweeperPool(StateHolder):
    """Sells the assets it owns and remits proceeds to its asset recipient."""

    def __init__(
        self,
        address: str,
        runtime: Runtime,
        native: InMemoryToken,
        nft: NonFungibleCollection,
        curve: LinearDecayCurve,
        asset_recipient: ValueReceiver,
    ) -> None:
        self.address = address
        self.runtime = runtime
        self.native = native
        self.nft = nft
        self.curve = curve
        self.asset_recipient = asset_recipient

    def spot_price(self) -> int:
        return self.curve.price_at(self.runtime.clock.timestamp)

    def buy(self, buyer: str, token_id: int) -> int:
        """Buy one asset at the current price; returns the price paid."""
        with self.runtime.transaction():
            if self.nft.owner_of(token_id) != self.address:
                raise StateError(f"Sweeper pool {self.address} does not hold token {token_id}")
            price = self.spot_price()
            self.nft.transfer_from(self.address, buyer, token_id)
            if price:
                self.native.transfer(buyer, self.asset_recipient.address, price)
                self.asset_recipient.receive(self.address, price)
        logger.info("sweeper_pool_sale", pool=self.address, token_id=token_id, price=price)
        return price


class SweeperPoolFactory(StateHolder):
    """Creates sweeper pools seeded with assets from their owner."""

    def __init__(self, runtime: Runtime, native: InMemoryToken) -> None:
        self.runtime = runtime
        self.native = native
        self.pools: list[SweeperPool] = []

    def create_pool(
        self,
        owner: str,
        nft: NonFungibleCollection,
        token_ids: Sequence[int],
        start_price: int,
        duration: int,
        asset_recipient: ValueReceiver,
    ) -> SweeperPool:
        seed = f"sweeper:{nft.address}:{len(self.pools)}".encode()
        address = "0x" + hashlib.sha3_256(seed).hexdigest()[-40:]
        pool = SweeperPool(
            address=address,
            runtime=self.runtime,
            native=self.native,
            nft=nft,
            curve=LinearDecayCurve(
                start_price=start_price,
                duration=duration,
                start_time=self.runtime.clock.timestamp,
            ),
            asset_recipient=asset_recipient,
        )
        for token_id in token_ids:
            nft.transfer_from(owner, pool.address, token_id)
        self.pools.append(pool)
        self.runtime.register(pool)
        logger.info("sweeper_pool_created", pool=address, assets=len(token_ids))
        return pool
