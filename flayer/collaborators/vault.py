"""In-memory vault and listings doubles.

The vault holds deposited assets and mints one whole collection token per
asset. Only the parts the shutdown engine calls into are modelled beyond
setup: sunsetting a collection, withdrawing a specific asset and the
open-listing query.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from flayer.collaborators.tokens import InMemoryNft, InMemoryToken
from flayer.errors import NotOwner, UnknownCollection, ValidationError
from flayer.journal import StateHolder
from flayer.models.types import normalize_address

logger = structlog.get_logger()


class InMemoryVault(StateHolder):
    """Deposit bookkeeping for registered collections."""

    def __init__(self, address: str) -> None:
        self.address = normalize_address(address, validate=True)
        self.collection_shutdown: str | None = None
        self._nfts: dict[str, InMemoryNft] = {}
        self._tokens: dict[str, InMemoryToken] = {}
        self._listed: dict[str, set[int]] = {}

    def set_collection_shutdown(self, shutdown_address: str) -> None:
        self.collection_shutdown = normalize_address(shutdown_address)

    def register_collection(self, nft: InMemoryNft, token: InMemoryToken) -> None:
        collection = nft.address
        if collection in self._tokens:
            raise ValidationError(f"Collection already registered: {collection}")
        self._nfts[collection] = nft
        self._tokens[collection] = token
        self._listed.setdefault(collection, set())

    def deposit(self, sender: str, collection: str, token_ids: Iterable[int]) -> int:
        """Move assets into the vault and mint one whole token per asset to the sender."""
        token = self._require_token(collection)
        nft = self._nfts[normalize_address(collection)]
        count = 0
        for token_id in token_ids:
            nft.transfer_from(sender, self.address, token_id)
            count += 1
        amount = count * 10**18 * 10 ** token.denomination()
        token.mint(sender, amount)
        return amount

    def collection_token(self, collection: str) -> InMemoryToken | None:
        return self._tokens.get(normalize_address(collection))

    def nft(self, collection: str) -> InMemoryNft:
        try:
            return self._nfts[normalize_address(collection)]
        except KeyError:
            raise UnknownCollection(f"Collection not known to vault: {collection}") from None

    def sunset_collection(self, caller: str, collection: str) -> None:
        self._require_shutdown(caller)
        collection = normalize_address(collection)
        token = self._require_token(collection)
        held = token.balance_of(self.address)
        if held:
            token.burn(self.address, held)
        del self._tokens[collection]
        logger.info("vault_collection_sunset", collection=collection, burned=held)

    def withdraw_token(self, caller: str, collection: str, token_id: int, recipient: str) -> None:
        self._require_shutdown(caller)
        self.nft(collection).transfer_from(self.address, recipient, token_id)

    def set_listing(self, collection: str, token_id: int, listed: bool) -> None:
        ids = self._listed.setdefault(normalize_address(collection), set())
        if listed:
            ids.add(token_id)
        else:
            ids.discard(token_id)

    def is_listing(self, collection: str, token_id: int) -> bool:
        return token_id in self._listed.get(normalize_address(collection), set())

    def _require_token(self, collection: str) -> InMemoryToken:
        token = self.collection_token(collection)
        if token is None:
            raise UnknownCollection(f"Collection not registered: {collection}")
        return token

    def _require_shutdown(self, caller: str) -> None:
        if normalize_address(caller) != self.collection_shutdown:
            raise NotOwner(f"{caller} is not the collection shutdown contract")


class InMemoryListings(StateHolder):
    """Open listing counts per collection (plain or protected)."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def set_listing_count(self, collection: str, count: int) -> None:
        self._counts[normalize_address(collection)] = count

    def listing_count(self, collection: str) -> int:
        return self._counts.get(normalize_address(collection), 0)
