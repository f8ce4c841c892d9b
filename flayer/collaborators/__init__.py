"""Collaborator boundaries and in-memory implementations."""

from flayer.collaborators.base import (
    FungibleToken,
    LiquidationPool,
    LiquidationPoolFactory,
    ListingCounter,
    NonFungibleCollection,
    ValueReceiver,
    Vault,
)
from flayer.collaborators.sweeper import LinearDecayCurve, SweeperPool, SweeperPoolFactory
from flayer.collaborators.tokens import InMemoryNft, InMemoryToken
from flayer.collaborators.vault import InMemoryListings, InMemoryVault

__all__ = [
    # Boundaries
    "FungibleToken",
    "NonFungibleCollection",
    "Vault",
    "ListingCounter",
    "ValueReceiver",
    "LiquidationPool",
    "LiquidationPoolFactory",
    # In-memory implementations
    "InMemoryToken",
    "InMemoryNft",
    "InMemoryVault",
    "InMemoryListings",
    "LinearDecayCurve",
    "SweeperPool",
    "SweeperPoolFactory",
]
