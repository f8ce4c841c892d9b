"""Observable events emitted by the fee and shutdown engines.

Each event is a frozen pydantic model whose fields are exactly the fields an
off-chain observer receives. encode_data() ABI-encodes them in declaration
order, so a consumer decoding with the Solidity signature gets the same
payload it would from a log entry.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, ClassVar, TypeVar

from eth_abi import encode  # type: ignore[attr-defined]
from pydantic import BaseModel, ConfigDict

from flayer.journal import StateHolder

E = TypeVar("E", bound="Event")


class Event(BaseModel):
    """Base class for all emitted events."""

    model_config = ConfigDict(frozen=True)

    # ABI types in field declaration order
    abi_types: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def signature(cls) -> str:
        return f"{cls.__name__}({','.join(cls.abi_types)})"

    def abi_values(self) -> tuple[Any, ...]:
        values = []
        for abi_type, name in zip(self.abi_types, type(self).model_fields, strict=True):
            value = getattr(self, name)
            if abi_type == "bytes32":
                value = bytes.fromhex(value.removeprefix("0x"))
            elif abi_type == "uint256[]":
                value = list(value)
            values.append(value)
        return tuple(values)

    def encode_data(self) -> bytes:
        return encode(list(self.abi_types), list(self.abi_values()))


# --- Fee events ---


class DefaultFeeSet(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("uint24",)
    fee: int


class PoolFeeSet(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("bytes32", "uint24")
    pool_id: str
    fee: int


class BeneficiaryFeeExemptionSet(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "uint24")
    beneficiary: str
    fee: int


class BeneficiaryFeeExemptionRemoved(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address",)
    beneficiary: str


class AMMBeneficiarySet(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address",)
    beneficiary: str


class BeneficiaryUpdated(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address",)
    beneficiary: str


class BeneficiaryRoyaltyUpdated(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("uint256",)
    royalty: int


class DonateThresholdsUpdated(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("uint256", "uint256")
    donate_threshold_min: int
    donate_threshold_max: int


class AMMFeesTaken(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "uint256")
    recipient: str
    token: str
    amount: int


class BeneficiaryFeesClaimed(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "uint256")
    beneficiary: str
    amount: int


class PoolFeesReceived(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "uint256", "uint256")
    collection: str
    amount0: int
    amount1: int


class PoolFeesDistributed(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "uint256", "uint256")
    collection: str
    donate_amount: int
    beneficiary_amount: int


class PoolFeesSwapped(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "bool", "uint256", "uint256")
    collection: str
    zero_for_one: bool
    amount0: int
    amount1: int


# --- Shutdown events ---


class CollectionShutdownStarted(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address",)
    collection: str


class CollectionShutdownVote(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "uint256")
    collection: str
    voter: str
    vote: int


class CollectionShutdownQuorumReached(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address",)
    collection: str


class CollectionShutdownExecuted(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "uint256[]")
    collection: str
    pool: str
    token_ids: tuple[int, ...]


class CollectionShutdownCancelled(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address",)
    collection: str


class CollectionShutdownVoteReclaim(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "uint256")
    collection: str
    voter: str
    vote: int


class CollectionShutdownClaim(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "uint256", "uint256")
    collection: str
    claimant: str
    token_amount: int
    eth_amount: int


class CollectionShutdownTokenLiquidated(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "uint256")
    collection: str
    eth_amount: int


class CollectionShutdownPrevention(Event):
    abi_types: ClassVar[tuple[str, ...]] = ("address", "bool")
    collection: str
    prevented: bool


class EventLog(StateHolder):
    """Ordered record of emitted events.

    The log is registered with the transaction journal, so events emitted by
    an operation that later fails are rolled back with the rest of its state.
    """

    def __init__(self) -> None:
        self._events: list[Event] = []

    def emit(self, event: Event) -> None:
        self._events.append(event)

    def of_type(self, event_type: type[E]) -> list[E]:
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self) -> Event | None:
        return self._events[-1] if self._events else None

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)
