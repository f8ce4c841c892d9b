"""Tests for event models and their ABI encoding."""

import pytest
from eth_abi import decode  # type: ignore[attr-defined]
from pydantic import ValidationError as PydanticValidationError

from flayer.models.events import (
    AMMFeesTaken,
    CollectionShutdownExecuted,
    CollectionShutdownVote,
    DefaultFeeSet,
    EventLog,
    PoolFeeSet,
    PoolFeesSwapped,
)
from flayer.models.pool import PoolKey
from tests.helpers import ALICE, NATIVE, NFT, TOKEN


class TestEventSignatures:
    def test_signature_lists_abi_types(self):
        assert CollectionShutdownVote.signature() == (
            "CollectionShutdownVote(address,address,uint256)"
        )
        assert CollectionShutdownExecuted.signature() == (
            "CollectionShutdownExecuted(address,address,uint256[])"
        )
        assert DefaultFeeSet.signature() == "DefaultFeeSet(uint24)"

    def test_events_are_frozen(self):
        event = DefaultFeeSet(fee=100)
        with pytest.raises(PydanticValidationError):
            event.fee = 5  # type: ignore[misc]


class TestEncodeData:
    """Encoded payloads decode back to the exact field values."""

    def test_address_and_amount(self):
        event = AMMFeesTaken(recipient=ALICE, token=TOKEN, amount=123)
        recipient, token, amount = decode(["address", "address", "uint256"], event.encode_data())
        assert recipient.lower() == ALICE
        assert token.lower() == TOKEN
        assert amount == 123

    def test_pool_id_as_bytes32(self):
        pool_id = PoolKey.for_pair(NATIVE, TOKEN).pool_id
        event = PoolFeeSet(pool_id=pool_id, fee=500)
        raw, fee = decode(["bytes32", "uint24"], event.encode_data())
        assert "0x" + raw.hex() == pool_id
        assert fee == 500

    def test_token_id_array(self):
        event = CollectionShutdownExecuted(collection=NFT, pool=ALICE, token_ids=(3, 1, 2))
        _, _, token_ids = decode(["address", "address", "uint256[]"], event.encode_data())
        assert list(token_ids) == [3, 1, 2]

    def test_bool_field(self):
        event = PoolFeesSwapped(collection=NFT, zero_for_one=True, amount0=1, amount1=2)
        assert decode(["address", "bool", "uint256", "uint256"], event.encode_data())[1] is True


class TestEventLog:
    def test_records_in_order_and_filters(self):
        log = EventLog()
        first = DefaultFeeSet(fee=1)
        vote = CollectionShutdownVote(collection=NFT, voter=ALICE, vote=5)
        second = DefaultFeeSet(fee=2)
        for event in (first, vote, second):
            log.emit(event)

        assert len(log) == 3
        assert list(log) == [first, vote, second]
        assert log.of_type(DefaultFeeSet) == [first, second]
        assert log.last() == second

    def test_empty_log(self):
        log = EventLog()
        assert log.last() is None
        assert log.of_type(DefaultFeeSet) == []
