"""Boundaries of the collaborators the engines call into.

The engines only depend on these protocols. The in-memory implementations
in this package are simulation doubles used by tests, the HTTP service and
the scripts; a deployment would bind the same protocols to chain clients.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class FungibleToken(Protocol):
    """ERC20-style token (collection tokens and the native token)."""

    address: str

    def denomination(self) -> int: ...

    def total_supply(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None: ...

    def burn(self, account: str, amount: int) -> None: ...

    def burn_from(self, spender: str, account: str, amount: int) -> None: ...


@runtime_checkable
class NonFungibleCollection(Protocol):
    """ERC721-style collection."""

    address: str

    def owner_of(self, token_id: int) -> str | None: ...

    def transfer_from(self, sender: str, recipient: str, token_id: int) -> None: ...


class Vault(Protocol):
    """Deposit/redeem bookkeeping holding the collection's assets."""

    address: str

    def collection_token(self, collection: str) -> FungibleToken | None: ...

    def nft(self, collection: str) -> NonFungibleCollection: ...

    def sunset_collection(self, caller: str, collection: str) -> None:
        """Burn the vault's own collection-token balance and delete the registration."""
        ...

    def withdraw_token(self, caller: str, collection: str, token_id: int, recipient: str) -> None: ...

    def is_listing(self, collection: str, token_id: int) -> bool: ...


class ListingCounter(Protocol):
    """Listings and protected listings expose the same count query."""

    def listing_count(self, collection: str) -> int: ...


class ValueReceiver(Protocol):
    """Something a plain native-token transfer can be remitted to."""

    address: str

    def receive(self, sender: str, amount: int) -> None: ...


class LiquidationPool(Protocol):
    address: str


class LiquidationPoolFactory(Protocol):
    """Creates pools that sell assets and remit proceeds to a receiver."""

    def create_pool(
        self,
        owner: str,
        nft: NonFungibleCollection,
        token_ids: Sequence[int],
        start_price: int,
        duration: int,
        asset_recipient: ValueReceiver,
    ) -> LiquidationPool: ...
