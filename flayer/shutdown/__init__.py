"""Collection shutdown engine."""

from flayer.shutdown.engine import CollectionShutdown
from flayer.shutdown.params import CollectionShutdownParams, ShutdownState

__all__ = ["CollectionShutdown", "CollectionShutdownParams", "ShutdownState"]
