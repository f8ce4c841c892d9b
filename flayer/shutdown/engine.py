"""Collection shutdown: vote, execute, liquidate and claim.

A collection whose fungible supply has dwindled can be wound down by its
holders. Holders vote by escrowing their tokens with this engine; once the
votes reach quorum the owner executes the shutdown, which retires the
collection in the vault and sends its remaining assets to a sweeper pool.
Sale proceeds are remitted back here and, once every asset has sold, voters
claim a share proportional to their escrowed tokens over the total supply
fixed at execution.

Quorum is recomputed from the total supply at start and at execute only.
Votes cast in between count towards the quorum fixed at start.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from flayer.collaborators.base import (
    FungibleToken,
    ListingCounter,
    LiquidationPoolFactory,
    NonFungibleCollection,
    Vault,
)
from flayer.config import DEFAULT_SHUTDOWN_CONFIG, ShutdownConfig
from flayer.errors import (
    InsufficientTotalSupplyToCancel,
    ListingsExist,
    NoNFTsSupplied,
    NoTokensAvailableToClaim,
    NotAllTokensSold,
    NoVotesPlacedYet,
    ShutdownExecuted,
    ShutdownNotExecuted,
    ShutdownNotReachedQuorum,
    ShutdownPrevented,
    ShutdownProcessAlreadyStarted,
    ShutdownProcessNotStarted,
    ShutdownQuorumHasPassed,
    TokenIsListed,
    TooManyItems,
    UnknownCollection,
    UserHoldsNoTokens,
)
from flayer.journal import StateHolder
from flayer.models.events import (
    CollectionShutdownCancelled,
    CollectionShutdownClaim,
    CollectionShutdownExecuted,
    CollectionShutdownPrevention,
    CollectionShutdownQuorumReached,
    CollectionShutdownStarted,
    CollectionShutdownTokenLiquidated,
    CollectionShutdownVote,
    CollectionShutdownVoteReclaim,
)
from flayer.models.types import normalize_address
from flayer.runtime import Runtime, entry_point
from flayer.safe_int import S
from flayer.shutdown.params import CollectionShutdownParams, ShutdownState

logger = structlog.get_logger()


class CollectionShutdown(StateHolder):
    """Shutdown engine for vault collections.

    Attributes:
        address: Account holding escrowed votes and liquidation proceeds
        config: Quorum percent, supply ceiling and sweeper pool pricing
    """

    def __init__(
        self,
        runtime: Runtime,
        address: str,
        vault: Vault,
        listings: ListingCounter,
        protected_listings: ListingCounter,
        pool_factory: LiquidationPoolFactory,
        native: FungibleToken,
        config: ShutdownConfig | None = None,
    ) -> None:
        self.runtime = runtime
        self.address = normalize_address(address, validate=True)
        self.vault = vault
        self.listings = listings
        self.protected_listings = protected_listings
        self.pool_factory = pool_factory
        self.native = native
        self.config = config or DEFAULT_SHUTDOWN_CONFIG
        self._params: dict[str, CollectionShutdownParams] = {}
        self._voters: dict[str, dict[str, int]] = {}
        self._prevented: set[str] = set()
        self._nfts: dict[str, NonFungibleCollection] = {}
        self._pool_collection: dict[str, str] = {}
        self._pool_token_ids: dict[str, list[int]] = {}
        runtime.register(self)

    # --- Queries ---

    def collection_params(self, collection: str) -> CollectionShutdownParams | None:
        return self._params.get(normalize_address(collection))

    def shutdown_voters(self, collection: str, voter: str) -> int:
        return self._voters.get(normalize_address(collection), {}).get(normalize_address(voter), 0)

    def voters(self, collection: str) -> dict[str, int]:
        """Copy of the non-zero escrow entries of a collection."""
        return {v: n for v, n in self._voters.get(normalize_address(collection), {}).items() if n}

    def is_prevented(self, collection: str) -> bool:
        return normalize_address(collection) in self._prevented

    def pool_collection(self, pool: str) -> str | None:
        return self._pool_collection.get(normalize_address(pool))

    def pool_token_ids(self, collection: str) -> list[int]:
        return list(self._pool_token_ids.get(normalize_address(collection), []))

    def state(self, collection: str) -> ShutdownState:
        params = self.collection_params(collection)
        if params is None:
            return ShutdownState.UNINITIATED
        return params.state(self.collection_liquidation_complete(collection))

    def collection_liquidation_complete(self, collection: str) -> bool:
        """True if no recorded asset is still owned by the sweeper pool.

        Also True when no assets were recorded, including after the first
        claim cleared them.
        """
        collection = normalize_address(collection)
        token_ids = self._pool_token_ids.get(collection)
        if not token_ids:
            return True
        params = self._params[collection]
        nft = self._nfts[collection]
        for token_id in token_ids:
            if nft.owner_of(token_id) == params.sweeper_pool:
                return False
        return True

    def claim_amount(self, collection: str, votes: int) -> int:
        """Native payout for a number of escrowed votes.

        available_claim * votes / total supply at the last quorum
        recomputation, so holders who never voted keep an implicit share.
        """
        params = self._require_params(collection)
        total = S.mul_div(params.quorum_votes, 100, self.config.quorum_percent)
        return S.mul_div(params.available_claim, votes, total).value

    # --- Voting ---

    @entry_point
    def start(self, caller: str, collection: str) -> None:
        """Start a shutdown and cast the caller's vote."""
        collection = normalize_address(collection)
        token = self.vault.collection_token(collection)
        if token is None:
            raise UnknownCollection(f"Collection not known to vault: {collection}")
        if collection in self._prevented:
            raise ShutdownPrevented(f"Shutdown prevented for {collection}")

        params = self._params.get(collection)
        if params is not None and (params.shutdown_votes != 0 or params.is_executed):
            raise ShutdownProcessAlreadyStarted(f"Shutdown already started for {collection}")

        total_supply = token.total_supply()
        max_supply = self.config.max_shutdown_tokens * 10 ** token.denomination()
        if total_supply > max_supply:
            raise TooManyItems(f"Total supply {total_supply} exceeds {max_supply}")

        params = CollectionShutdownParams(
            collection_token=token,
            quorum_votes=self._quorum(total_supply),
        )
        self._params[collection] = params
        self._voters[collection] = {}
        self._nfts[collection] = self.vault.nft(collection)

        self.runtime.events.emit(CollectionShutdownStarted(collection=collection))
        logger.info("shutdown_started", collection=collection, quorum_votes=params.quorum_votes)
        self._vote(collection, params, normalize_address(caller))

    @entry_point
    def vote(self, caller: str, collection: str) -> int:
        """Escrow the caller's whole balance as votes; returns the votes added."""
        collection = normalize_address(collection)
        params = self._params.get(collection)
        if params is None or not params.is_active:
            raise ShutdownProcessNotStarted(f"No shutdown started for {collection}")
        if params.is_executed:
            raise ShutdownExecuted(f"Shutdown already executed for {collection}")
        if params.cancelled:
            raise ShutdownProcessNotStarted(f"Shutdown for {collection} was cancelled")
        return self._vote(collection, params, normalize_address(caller))

    def _vote(self, collection: str, params: CollectionShutdownParams, voter: str) -> int:
        token = params.collection_token
        balance = token.balance_of(voter)
        if balance == 0:
            logger.debug("vote_rejected_no_balance", collection=collection, voter=voter)
            raise UserHoldsNoTokens(f"{voter} holds no {collection} tokens")

        token.transfer_from(self.address, voter, self.address, balance)
        params.shutdown_votes = (S(params.shutdown_votes) + balance).value
        voters = self._voters.setdefault(collection, {})
        voters[voter] = voters.get(voter, 0) + balance
        self.runtime.events.emit(
            CollectionShutdownVote(collection=collection, voter=voter, vote=balance)
        )
        logger.info(
            "shutdown_vote",
            collection=collection,
            voter=voter,
            vote=balance,
            shutdown_votes=params.shutdown_votes,
        )

        if not params.can_execute and params.shutdown_votes >= params.quorum_votes:
            params.can_execute = True
            self.runtime.events.emit(CollectionShutdownQuorumReached(collection=collection))
            logger.info("shutdown_quorum_reached", collection=collection)
        return balance

    @entry_point
    def cancel(self, caller: str, collection: str) -> None:
        """Cancel a shutdown whose collection has grown past the supply ceiling.

        Escrowed votes are not refunded; voters reclaim them individually.
        """
        collection = normalize_address(collection)
        params = self._params.get(collection)
        if params is None or not params.can_execute:
            raise ShutdownNotReachedQuorum(f"Shutdown for {collection} has not reached quorum")

        token = params.collection_token
        max_supply = self.config.max_shutdown_tokens * 10 ** token.denomination()
        if token.total_supply() <= max_supply:
            raise InsufficientTotalSupplyToCancel(
                f"Total supply {token.total_supply()} has not grown past {max_supply}"
            )

        params.can_execute = False
        params.cancelled = True
        self.runtime.events.emit(CollectionShutdownCancelled(collection=collection))
        logger.info("shutdown_cancelled", collection=collection, caller=caller)

    @entry_point
    def reclaim_vote(self, caller: str, collection: str) -> int:
        """Return the caller's escrowed votes; only possible before quorum."""
        collection = normalize_address(collection)
        voter = normalize_address(caller)
        params = self._params.get(collection)
        if params is not None and (params.can_execute or params.is_executed):
            raise ShutdownQuorumHasPassed(f"Quorum has passed for {collection}")

        votes = self.shutdown_voters(collection, voter)
        if params is None or votes == 0:
            raise NoVotesPlacedYet(f"{voter} has no votes for {collection}")

        params.shutdown_votes = (S(params.shutdown_votes) - votes).value
        del self._voters[collection][voter]
        params.collection_token.transfer(self.address, voter, votes)

        self.runtime.events.emit(
            CollectionShutdownVoteReclaim(collection=collection, voter=voter, vote=votes)
        )
        logger.info("shutdown_vote_reclaimed", collection=collection, voter=voter, vote=votes)
        return votes

    # --- Liquidation ---

    @entry_point
    def execute(self, caller: str, collection: str, token_ids: Sequence[int]) -> str:
        """Retire the collection and send its assets to a sweeper pool.

        Returns:
            Address of the sweeper pool
        """
        self.runtime.require_owner(caller)
        collection = normalize_address(collection)
        params = self._params.get(collection)
        if params is None or not params.can_execute:
            raise ShutdownNotReachedQuorum(f"Shutdown for {collection} has not reached quorum")
        if not token_ids:
            raise NoNFTsSupplied("No assets supplied for liquidation")
        if self.listings.listing_count(collection) or self.protected_listings.listing_count(
            collection
        ):
            raise ListingsExist(f"Open listings exist for {collection}")
        for token_id in token_ids:
            if self.vault.is_listing(collection, token_id):
                raise TokenIsListed(f"Token {token_id} of {collection} is listed")

        params.executing = True
        params.quorum_votes = self._quorum(params.collection_token.total_supply())

        nft = self._nfts.get(collection) or self.vault.nft(collection)
        self._nfts[collection] = nft
        self.vault.sunset_collection(self.address, collection)
        for token_id in token_ids:
            self.vault.withdraw_token(self.address, collection, token_id, self.address)

        pool = self.pool_factory.create_pool(
            owner=self.address,
            nft=nft,
            token_ids=list(token_ids),
            start_price=self.config.sweeper_start_price,
            duration=self.config.sweeper_duration,
            asset_recipient=self,
        )

        params.sweeper_pool = normalize_address(pool.address)
        self._pool_collection[params.sweeper_pool] = collection
        self._pool_token_ids[collection] = list(token_ids)
        params.can_execute = False
        params.executing = False

        self.runtime.events.emit(
            CollectionShutdownExecuted(
                collection=collection, pool=params.sweeper_pool, token_ids=tuple(token_ids)
            )
        )
        logger.info(
            "shutdown_executed",
            collection=collection,
            pool=params.sweeper_pool,
            assets=len(token_ids),
            quorum_votes=params.quorum_votes,
        )
        return params.sweeper_pool

    def receive(self, sender: str, amount: int) -> None:
        """Accept a native remittance and attribute it to a collection.

        The native amount has already been transferred to this engine's
        address. Remittances from unknown senders are kept unattributed.
        """
        sender = normalize_address(sender)
        with self.runtime.transaction():
            collection = self._pool_collection.get(sender)
            if collection is None:
                logger.warning("unattributed_remittance", sender=sender, amount=amount)
                return
            params = self._params[collection]
            params.available_claim = (S(params.available_claim) + amount).value
            self.runtime.events.emit(
                CollectionShutdownTokenLiquidated(collection=collection, eth_amount=amount)
            )
        logger.info("shutdown_proceeds_received", collection=collection, eth_amount=amount)

    # --- Claims ---

    @entry_point
    def claim(self, caller: str, collection: str, claimant: str | None = None) -> int:
        """Burn the claimant's escrowed votes and pay their share of proceeds.

        Anyone may trigger a claim; the payout always goes to the claimant.

        Returns:
            Native amount paid
        """
        collection = normalize_address(collection)
        claimant = normalize_address(claimant or caller)
        votes = self.shutdown_voters(collection, claimant)
        if votes == 0:
            raise NoTokensAvailableToClaim(f"{claimant} has no votes to claim for {collection}")

        params = self._require_settleable(collection)
        params.collection_token.burn(self.address, votes)
        params.shutdown_votes = (S(params.shutdown_votes) - votes).value
        del self._voters[collection][claimant]

        return self._pay_claim(collection, claimant, votes)

    @entry_point
    def vote_and_claim(self, caller: str, collection: str) -> int:
        """Burn the caller's whole balance and pay its share in one call.

        For holders who never voted. Vote totals and quorum are left as
        fixed at execution.
        """
        collection = normalize_address(collection)
        claimant = normalize_address(caller)
        params = self._require_settleable(collection)

        token = params.collection_token
        balance = token.balance_of(claimant)
        if balance == 0:
            raise UserHoldsNoTokens(f"{claimant} holds no {collection} tokens")
        token.burn_from(self.address, claimant, balance)

        return self._pay_claim(collection, claimant, balance)

    def _require_settleable(self, collection: str) -> CollectionShutdownParams:
        params = self._params.get(collection)
        if params is None or not params.is_executed:
            raise ShutdownNotExecuted(f"Shutdown for {collection} has not been executed")
        if not self.collection_liquidation_complete(collection):
            raise NotAllTokensSold(f"Sweeper pool for {collection} still holds assets")
        # Sell-through is final; the first claim drops the recorded assets
        self._pool_token_ids.pop(collection, None)
        return params

    def _pay_claim(self, collection: str, claimant: str, votes: int) -> int:
        amount = self.claim_amount(collection, votes)
        if amount:
            self.native.transfer(self.address, claimant, amount)
        self.runtime.events.emit(
            CollectionShutdownClaim(
                collection=collection, claimant=claimant, token_amount=votes, eth_amount=amount
            )
        )
        logger.info(
            "shutdown_claim", collection=collection, claimant=claimant, votes=votes, amount=amount
        )
        return amount

    # --- Administration ---

    @entry_point
    def prevent_shutdown(self, caller: str, collection: str, prevent: bool) -> None:
        self.runtime.require_owner(caller)
        collection = normalize_address(collection)
        params = self._params.get(collection)
        if params is not None and params.shutdown_votes != 0:
            raise ShutdownProcessAlreadyStarted(f"Shutdown already started for {collection}")
        if prevent:
            self._prevented.add(collection)
        else:
            self._prevented.discard(collection)
        self.runtime.events.emit(
            CollectionShutdownPrevention(collection=collection, prevented=prevent)
        )
        logger.info("shutdown_prevention_set", collection=collection, prevented=prevent)

    def _quorum(self, total_supply: int) -> int:
        return S.mul_div(total_supply, self.config.quorum_percent, 100).value

    def _require_params(self, collection: str) -> CollectionShutdownParams:
        params = self._params.get(normalize_address(collection))
        if params is None:
            raise ShutdownProcessNotStarted(f"No shutdown started for {collection}")
        return params
