"""Tests for fee resolution and the owner-managed fee table."""

import pytest

from flayer.config import FeeConfig
from flayer.errors import FeeTooHigh, NoBeneficiaryExemption, NotOwner, Paused
from flayer.fees import FeeOverride, validate_fee
from flayer.models.events import (
    BeneficiaryFeeExemptionRemoved,
    BeneficiaryFeeExemptionSet,
    DefaultFeeSet,
    PoolFeeSet,
)
from tests.helpers import ALICE, BOB, OWNER, TRADER, make_protocol


class TestValidateFee:
    @pytest.mark.parametrize("fee", [0, 1, 1_000, 100_000])
    def test_accepts_in_range(self, fee):
        assert validate_fee(fee) == fee

    @pytest.mark.parametrize("fee", [-1, 100_001, 2**24])
    def test_rejects_out_of_range(self, fee):
        with pytest.raises(FeeTooHigh):
            validate_fee(fee)


class TestFeeResolution:
    """Exemption, then pool fee, then default."""

    def test_default_fee_applies_without_pool_fee(self, protocol, key):
        assert protocol.registry.get_fee(key.pool_id) == 1_000
        assert protocol.registry.get_fee(key.pool_id, TRADER) == 1_000
        assert protocol.registry.pool_fee(key.pool_id) is None

    def test_configured_default(self):
        protocol = make_protocol(fee_config=FeeConfig(default_fee=250))
        assert protocol.registry.get_fee("0x" + "00" * 32) == 250

    def test_pool_fee_overrides_default(self, protocol, key):
        protocol.registry.set_fee(OWNER, key.pool_id, 3_000)
        assert protocol.registry.get_fee(key.pool_id) == 3_000
        assert protocol.registry.pool_fee(key.pool_id) == 3_000

    def test_zero_exemption_waives_fee(self, protocol, key):
        protocol.registry.set_fee(OWNER, key.pool_id, 3_000)
        protocol.registry.set_fee_exemption(OWNER, ALICE, 0)

        assert protocol.registry.get_fee(key.pool_id, ALICE) == 0
        assert protocol.registry.get_fee(key.pool_id, BOB) == 3_000
        assert protocol.registry.fee_exemption(ALICE) == FeeOverride(fee=0, enabled=True)

    def test_exemption_can_raise_fee(self, protocol, key):
        protocol.registry.set_fee_exemption(OWNER, ALICE, 50_000)
        assert protocol.registry.get_fee(key.pool_id, ALICE) == 50_000

    def test_exemption_lookup_ignores_case(self, protocol, key):
        protocol.registry.set_fee_exemption(OWNER, ALICE, 10)
        assert protocol.registry.get_fee(key.pool_id, ALICE.upper().replace("0X", "0x")) == 10

    def test_removed_exemption_falls_back(self, protocol, key):
        protocol.registry.set_fee_exemption(OWNER, ALICE, 0)
        protocol.registry.remove_fee_exemption(OWNER, ALICE)
        assert protocol.registry.get_fee(key.pool_id, ALICE) == 1_000
        assert protocol.registry.fee_exemption(ALICE) is None

    def test_clear_fee_returns_pool_to_default(self, protocol, key):
        protocol.registry.set_fee(OWNER, key.pool_id, 3_000)
        protocol.registry.clear_fee(OWNER, key.pool_id)
        protocol.registry.set_default_fee(OWNER, 700)
        assert protocol.registry.get_fee(key.pool_id) == 700


class TestFeeSetters:
    def test_setters_emit_events(self, protocol, key):
        protocol.registry.set_default_fee(OWNER, 500)
        protocol.registry.set_fee(OWNER, key.pool_id, 800)
        protocol.registry.set_fee_exemption(OWNER, ALICE, 0)
        protocol.registry.remove_fee_exemption(OWNER, ALICE)

        events = protocol.runtime.events
        assert events.of_type(DefaultFeeSet) == [DefaultFeeSet(fee=500)]
        assert events.of_type(PoolFeeSet) == [PoolFeeSet(pool_id=key.pool_id, fee=800)]
        assert events.of_type(BeneficiaryFeeExemptionSet) == [
            BeneficiaryFeeExemptionSet(beneficiary=ALICE, fee=0)
        ]
        assert events.of_type(BeneficiaryFeeExemptionRemoved) == [
            BeneficiaryFeeExemptionRemoved(beneficiary=ALICE)
        ]

    def test_fee_above_maximum_rejected_and_unchanged(self, protocol, key):
        with pytest.raises(FeeTooHigh):
            protocol.registry.set_fee(OWNER, key.pool_id, 100_001)
        with pytest.raises(FeeTooHigh):
            protocol.registry.set_default_fee(OWNER, 100_001)
        with pytest.raises(FeeTooHigh):
            protocol.registry.set_fee_exemption(OWNER, ALICE, 100_001)

        assert protocol.registry.get_fee(key.pool_id, ALICE) == 1_000
        assert len(protocol.runtime.events.of_type(PoolFeeSet)) == 0

    def test_maximum_fee_accepted(self, protocol, key):
        protocol.registry.set_fee(OWNER, key.pool_id, 100_000)
        assert protocol.registry.get_fee(key.pool_id) == 100_000

    @pytest.mark.parametrize(
        "call",
        [
            lambda r, pool_id: r.set_default_fee(ALICE, 1),
            lambda r, pool_id: r.set_fee(ALICE, pool_id, 1),
            lambda r, pool_id: r.clear_fee(ALICE, pool_id),
            lambda r, pool_id: r.set_fee_exemption(ALICE, ALICE, 0),
            lambda r, pool_id: r.remove_fee_exemption(ALICE, ALICE),
        ],
    )
    def test_non_owner_rejected(self, protocol, key, call):
        with pytest.raises(NotOwner):
            call(protocol.registry, key.pool_id)
        assert len(protocol.runtime.events) == 0

    def test_remove_missing_exemption(self, protocol):
        with pytest.raises(NoBeneficiaryExemption):
            protocol.registry.remove_fee_exemption(OWNER, BOB)

    def test_setters_blocked_while_paused(self, protocol, key):
        protocol.runtime.set_paused(OWNER, True)
        with pytest.raises(Paused):
            protocol.registry.set_fee(OWNER, key.pool_id, 5)
        assert protocol.registry.pool_fee(key.pool_id) is None
