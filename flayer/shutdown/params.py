"""Per-collection shutdown record and its derived lifecycle state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from flayer.collaborators.base import FungibleToken


class ShutdownState(str, Enum):
    """Lifecycle of a collection shutdown.

    UNINITIATED -> STARTED -> QUORUM_REACHED -> EXECUTING -> LIQUIDATING
    -> SETTLEABLE -> RETIRED, with CANCELLED reachable from QUORUM_REACHED
    and RECLAIMED from STARTED.
    RETIRED means every escrowed vote and every held token has been burned
    through a claim, so no further action is possible.
    """

    UNINITIATED = "uninitiated"
    STARTED = "started"
    QUORUM_REACHED = "quorum_reached"
    EXECUTING = "executing"
    LIQUIDATING = "liquidating"
    SETTLEABLE = "settleable"
    RETIRED = "retired"
    CANCELLED = "cancelled"
    RECLAIMED = "reclaimed"


@dataclass
class CollectionShutdownParams:
    """Shutdown record of one collection.

    Attributes:
        collection_token: The collection's fungible supply
        shutdown_votes: Tokens currently escrowed as votes
        quorum_votes: total_supply * quorum_percent // 100, as of the last
            recomputation (start and execute only)
        can_execute: Quorum was reached and not yet consumed by execute
        sweeper_pool: Liquidation pool address, set by execute
        available_claim: Proceeds remitted by the liquidation pool
        cancelled: Cancelled after quorum; only reclaims are accepted
        executing: An execute call is in flight
    """

    collection_token: FungibleToken
    shutdown_votes: int = 0
    quorum_votes: int = 0
    can_execute: bool = False
    sweeper_pool: str | None = None
    available_claim: int = 0
    cancelled: bool = False
    executing: bool = False

    @property
    def is_active(self) -> bool:
        return self.quorum_votes != 0

    @property
    def is_executed(self) -> bool:
        return self.sweeper_pool is not None

    def state(self, liquidation_complete: bool) -> ShutdownState:
        """Derive the lifecycle state of this record."""
        if self.executing:
            return ShutdownState.EXECUTING
        if self.is_executed:
            if not liquidation_complete:
                return ShutdownState.LIQUIDATING
            if self.shutdown_votes == 0 and self.collection_token.total_supply() == 0:
                return ShutdownState.RETIRED
            return ShutdownState.SETTLEABLE
        if self.can_execute:
            return ShutdownState.QUORUM_REACHED
        if self.shutdown_votes == 0:
            return ShutdownState.RECLAIMED
        if self.cancelled:
            return ShutdownState.CANCELLED
        return ShutdownState.STARTED
