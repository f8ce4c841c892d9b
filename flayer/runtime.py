"""Execution environment shared by the fee and shutdown engines.

The Runtime supplies what a chain would supply to a contract:
- ownership checks for administrative calls
- a pause switch that blocks every state-mutating entry point
- a re-entrancy guard over the guarded entry points of both engines
- all-or-nothing transactions over every registered state holder
- a clock for time-based pricing
- the event log

Engines never reach for a global: the runtime is passed in and each engine
registers itself with it. Collaborators the engines hold are journaled
through those references.
"""

from __future__ import annotations

import copy
import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

import structlog

from flayer.errors import NotOwner, Paused, ReentrantCall
from flayer.journal import REACHED
from flayer.models.events import EventLog
from flayer.models.types import normalize_address

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])

# (registered roots, [(holder, copied attributes)])
Snapshot = tuple[list[object], list[tuple[object, dict[str, Any]]]]


class Clock:
    """Block timestamp source (seconds)."""

    def __init__(self, timestamp: int = 1_700_000_000) -> None:
        self.timestamp = timestamp

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"Clock cannot move backwards: {seconds}")
        self.timestamp += seconds
        return self.timestamp


class Runtime:
    """Ownership, pause switch, re-entrancy guard and transaction journal.

    Attributes:
        owner: Address allowed to make administrative calls
        paused: When True, guarded entry points raise Paused
        clock: Timestamp source
        events: Event log (rolled back with failed transactions)
    """

    def __init__(self, owner: str, clock: Clock | None = None) -> None:
        self.owner = normalize_address(owner)
        self.paused = False
        self.clock = clock or Clock()
        self.events = EventLog()
        self._entered = False
        self._depth = 0
        self._holders: list[object] = [self.events]

    def register(self, *holders: object) -> None:
        """Add roots for transaction snapshots.

        Every StateHolder reachable from a root is journaled as well.
        """
        for holder in holders:
            if not any(holder is h for h in self._holders):
                self._holders.append(holder)

    # --- Ownership and pause switch ---

    def require_owner(self, caller: str) -> None:
        if normalize_address(caller) != self.owner:
            logger.debug("caller_not_owner", caller=caller)
            raise NotOwner(f"{caller} is not the owner")

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.require_owner(caller)
        self.owner = normalize_address(new_owner, validate=True)
        logger.info("ownership_transferred", owner=self.owner)

    def set_paused(self, caller: str, paused: bool) -> None:
        self.require_owner(caller)
        self.paused = paused
        logger.info("pause_switch_set", paused=paused)

    def require_not_paused(self) -> None:
        if self.paused:
            raise Paused("Protocol is paused")

    # --- Re-entrancy and transactions ---

    @contextmanager
    def non_reentrant(self) -> Iterator[None]:
        if self._entered:
            raise ReentrantCall("Guarded entry point called re-entrantly")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run a block atomically against every registered state holder.

        Only the outermost transaction snapshots; nested blocks join it. If
        the block raises, every holder is restored and the error propagates.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        saved = self._snapshot()
        self._depth = 1
        try:
            yield
        except BaseException:
            self._restore(saved)
            logger.debug("transaction_reverted")
            raise
        finally:
            self._depth = 0

    @contextmanager
    def guarded(self, *, pausable: bool = True) -> Iterator[None]:
        if pausable:
            self.require_not_paused()
        with self.non_reentrant(), self.transaction():
            yield

    def _snapshot(self) -> Snapshot:
        registered = list(self._holders)
        pending: list[object] = list(registered)
        saved: list[tuple[object, dict[str, Any]]] = []
        seen: set[int] = set()
        while pending:
            holder = pending.pop(0)
            if id(holder) in seen:
                continue
            seen.add(id(holder))
            # Holders reached through these attributes are queued, not copied
            memo: dict[Any, Any] = {id(self): self, id(self.clock): self.clock, REACHED: pending}
            saved.append((holder, copy.deepcopy(vars(holder), memo)))
        return registered, saved

    def _restore(self, snapshot: Snapshot) -> None:
        registered, saved = snapshot
        for holder, state in saved:
            attrs = vars(holder)
            attrs.clear()
            attrs.update(state)
        # Holders registered by the failed block are dropped with it
        self._holders = registered


def entry_point(method: F) -> F:
    """Run a method of an object with a `runtime` attribute as a guarded call."""

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        with self.runtime.guarded():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
