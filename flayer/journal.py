"""Marker for objects whose state is journaled by the runtime.

A transaction snapshot deep-copies the attributes of each state holder.
References between holders are not copied: a holder met inside another
holder's attributes stays the same object and is itself snapshotted.
"""

from __future__ import annotations

from typing import Any

# Memo key under which a snapshot collects the holders it reaches
REACHED = "flayer.journal.reached"


class StateHolder:
    """Base for engines and collaborators that roll back with a failed call."""

    def __deepcopy__(self, memo: dict[Any, Any]) -> StateHolder:
        reached = memo.get(REACHED)
        if reached is not None:
            reached.append(self)
        return self
