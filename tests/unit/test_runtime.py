"""Tests for the runtime: ownership, pause switch, re-entrancy and transactions."""

import pytest

from flayer.collaborators.tokens import InMemoryToken
from flayer.errors import NotOwner, Paused, ReentrantCall
from flayer.journal import StateHolder
from flayer.models.events import DefaultFeeSet
from flayer.runtime import Clock, Runtime, entry_point
from tests.helpers import ALICE, BOB, OWNER, TOKEN


class Counter(StateHolder):
    """Minimal state holder with a nested collaborator."""

    def __init__(self, runtime: Runtime, token: InMemoryToken | None = None) -> None:
        self.runtime = runtime
        self.value = 0
        self.history: list[int] = []
        self.token = token
        runtime.register(self)

    @entry_point
    def bump(self, amount: int) -> int:
        self.value += amount
        self.history.append(amount)
        self.runtime.events.emit(DefaultFeeSet(fee=amount))
        if amount < 0:
            raise ValueError("negative bump")
        return self.value

    @entry_point
    def bump_twice(self, amount: int) -> int:
        self.value += amount
        return self.bump(amount)


@pytest.fixture
def runtime():
    return Runtime(OWNER, clock=Clock(1_000))


class TestOwnership:
    def test_owner_is_normalized(self):
        runtime = Runtime(OWNER.upper())
        runtime.require_owner(OWNER)

    def test_non_owner_rejected(self, runtime):
        with pytest.raises(NotOwner):
            runtime.require_owner(ALICE)

    def test_transfer_ownership(self, runtime):
        runtime.transfer_ownership(OWNER, ALICE)
        runtime.require_owner(ALICE)
        with pytest.raises(NotOwner):
            runtime.transfer_ownership(OWNER, BOB)

    def test_invalid_new_owner_rejected(self, runtime):
        with pytest.raises(ValueError):
            runtime.transfer_ownership(OWNER, "0x1234")


class TestPauseSwitch:
    def test_only_owner_pauses(self, runtime):
        with pytest.raises(NotOwner):
            runtime.set_paused(ALICE, True)
        assert runtime.paused is False

    def test_paused_blocks_entry_points(self, runtime):
        counter = Counter(runtime)
        runtime.set_paused(OWNER, True)
        with pytest.raises(Paused):
            counter.bump(1)
        assert counter.value == 0

        runtime.set_paused(OWNER, False)
        assert counter.bump(1) == 1

    def test_unpausable_guard_ignores_switch(self, runtime):
        runtime.set_paused(OWNER, True)
        with runtime.guarded(pausable=False):
            pass


class TestReentrancy:
    def test_nested_entry_point_rejected(self, runtime):
        counter = Counter(runtime)
        with pytest.raises(ReentrantCall):
            counter.bump_twice(1)
        assert counter.value == 0
        assert counter.history == []

    def test_guard_released_after_failure(self, runtime):
        counter = Counter(runtime)
        with pytest.raises(ValueError):
            counter.bump(-1)
        assert counter.bump(2) == 2


class TestTransactions:
    """A failed call leaves every journaled holder exactly as it was."""

    def test_failed_call_rolls_back_state_and_events(self, runtime):
        counter = Counter(runtime)
        counter.bump(5)

        with pytest.raises(ValueError):
            counter.bump(-3)

        assert counter.value == 5
        assert counter.history == [5]
        assert len(runtime.events) == 1

    def test_reachable_holders_roll_back(self, runtime):
        """A token held by a registered holder is restored without being registered."""
        token = InMemoryToken(TOKEN, "T")
        token.mint(ALICE, 100)
        counter = Counter(runtime, token)

        with pytest.raises(ValueError), runtime.transaction():
            token.transfer(ALICE, BOB, 40)
            counter.value = 9
            raise ValueError("abort")

        assert token.balance_of(ALICE) == 100
        assert token.balance_of(BOB) == 0
        assert counter.value == 0

    def test_identity_preserved_across_rollback(self, runtime):
        token = InMemoryToken(TOKEN, "T")
        counter = Counter(runtime, token)

        with pytest.raises(ValueError), runtime.transaction():
            raise ValueError("abort")

        assert counter.token is token
        assert counter.runtime is runtime

    def test_nested_transaction_joins_outer(self, runtime):
        counter = Counter(runtime)

        with pytest.raises(ValueError), runtime.transaction():
            counter.value = 1
            with runtime.transaction():
                counter.value = 2
            raise ValueError("outer fails")

        assert counter.value == 0

    def test_inner_failure_caught_inside_keeps_outer_changes(self, runtime):
        counter = Counter(runtime)

        with runtime.transaction():
            counter.value = 1
            with pytest.raises(ValueError), runtime.transaction():
                counter.value = 2
                raise ValueError("inner fails")

        # Only the outermost transaction snapshots
        assert counter.value == 2

    def test_holders_registered_by_failed_call_are_dropped(self, runtime):
        with pytest.raises(ValueError), runtime.transaction():
            Counter(runtime)
            raise ValueError("abort")

        assert len(runtime._holders) == 1

    def test_successful_call_commits(self, runtime):
        counter = Counter(runtime)
        with runtime.transaction():
            counter.value = 7
        assert counter.value == 7


class TestClock:
    def test_advance(self):
        clock = Clock(100)
        assert clock.advance(50) == 150
        assert clock.timestamp == 150

    def test_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            Clock(100).advance(-1)
