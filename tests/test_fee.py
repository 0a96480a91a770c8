"""Tests for the fee schedule config, runtime and JAX kernels."""

import pytest
import jax
import jax.numpy as jnp
from pydantic import ValidationError

from ticketfee.fee import (
    FeeScheduleConfig,
    FeeRuntime,
    DEFAULT_FEE_SCHEDULE,
    TIER_THRESHOLD,
    STANDARD_RATE,
    PREMIUM_RATE,
    PREMIUM_FLAT_FEE,
    VAT_RATE,
    STANDARD_CODE,
    PREMIUM_CODE,
    Tier,
    line_item_fees,
    cart_fee_totals,
    gateway_fee,
)
from ticketfee.runtime import QuantityNode
from ticketfee.cart import runtime_for


class TestFeeScheduleConfig:
    """Tests for FeeScheduleConfig parsing and defaults."""

    def test_defaults(self):
        config = FeeScheduleConfig()
        assert config.tier_threshold[0] == pytest.approx(5000.0)
        assert config.standard_rate[0] == pytest.approx(0.10)
        assert config.premium_rate[0] == pytest.approx(0.07)
        assert config.premium_flat_fee[0] == pytest.approx(50.0)
        assert config.vat_rate[0] == pytest.approx(0.075)
        assert config.vat_on_standard_tier is True
        assert config.gateway_rate[0] == pytest.approx(0.015)
        assert config.gateway_flat_fee[0] == pytest.approx(100.0)

    def test_module_constants_match_default(self):
        assert TIER_THRESHOLD == DEFAULT_FEE_SCHEDULE.tier_threshold[0]
        assert STANDARD_RATE == pytest.approx(0.10)
        assert PREMIUM_RATE == pytest.approx(0.07)
        assert PREMIUM_FLAT_FEE == pytest.approx(50.0)
        assert VAT_RATE == pytest.approx(0.075)

    def test_storefront_notation(self):
        """Amounts and rates accept the notation used in the admin UI."""
        config = FeeScheduleConfig(
            tier_threshold="₦7,500",
            standard_rate="800 bps",
            premium_flat_fee="10000 kobo",
            vat_rate=0.075,
        )
        assert config.tier_threshold[0] == pytest.approx(7500.0)
        assert config.standard_rate[0] == pytest.approx(0.08)
        assert config.premium_flat_fee[0] == pytest.approx(100.0)
        assert config.premium_flat_fee[1].symbol == "kobo"
        assert config.vat_rate[0] == pytest.approx(0.075)

    def test_bare_numeric_strings_are_naira(self):
        config = FeeScheduleConfig(tier_threshold="5000", premium_flat_fee="50")
        assert config.tier_threshold[0] == pytest.approx(5000.0)
        assert config.tier_threshold[1].symbol == "NGN"
        assert config.premium_flat_fee[0] == pytest.approx(50.0)

    def test_rate_above_one_rejected(self):
        with pytest.raises(ValidationError):
            FeeScheduleConfig(standard_rate="120%")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            FeeScheduleConfig(premium_flat_fee="-50 NGN")

    def test_rate_given_as_money_rejected(self):
        with pytest.raises(ValidationError):
            FeeScheduleConfig(vat_rate="75 NGN")

    def test_amount_in_other_currency_rejected(self):
        with pytest.raises(ValidationError):
            FeeScheduleConfig(tier_threshold="50 USD")

    def test_frozen(self):
        config = FeeScheduleConfig()
        with pytest.raises(ValidationError):
            config.vat_rate = (0.1, config.vat_rate[1])

    def test_hashable_for_runtime_cache(self):
        assert hash(FeeScheduleConfig()) == hash(FeeScheduleConfig())
        assert runtime_for(FeeScheduleConfig()) is runtime_for(DEFAULT_FEE_SCHEDULE)

    def test_summary_markdown(self):
        summary = DEFAULT_FEE_SCHEDULE.summary()
        assert summary.startswith("# Fee Schedule")
        assert "| Standard rate | 10% |" in summary
        assert "| Tier threshold | ₦5,000.00 |" in summary
        assert "| VAT rate | 7.5% |" in summary

    def test_summary_text(self):
        summary = FeeScheduleConfig(vat_on_standard_tier=False).summary(format="text")
        assert summary.splitlines()[0] == "Fee Schedule"
        assert "VAT on standard tier: included" in summary

    def test_to_runtime(self):
        runtime = DEFAULT_FEE_SCHEDULE.to_runtime()
        assert isinstance(runtime, FeeRuntime)
        assert isinstance(runtime.tier_threshold, QuantityNode)
        assert float(runtime.tier_threshold.value) == pytest.approx(5000.0)
        assert runtime.vat_rate.units.dimension == "dimensionless"
        assert runtime.vat_on_standard_tier is True

    def test_to_runtime_with_unit_check(self):
        runtime = DEFAULT_FEE_SCHEDULE.to_runtime(check_units=True)
        assert float(runtime.premium_flat_fee.value) == pytest.approx(50.0)

    def test_from_runtime_restores_original_units(self):
        config = FeeScheduleConfig(premium_flat_fee="5000 kobo")
        output = FeeScheduleConfig.from_runtime(config.to_runtime())
        assert output.premium_flat_fee.magnitude == pytest.approx(5000.0)
        assert str(output.premium_flat_fee.units) == "kobo"
        assert output.vat_rate.to("dimensionless").magnitude == pytest.approx(0.075)


class TestFeeRuntime:
    """Tests for FeeRuntime as a JAX pytree."""

    def test_leaves(self):
        runtime = DEFAULT_FEE_SCHEDULE.to_runtime()
        leaves = jax.tree_util.tree_leaves(runtime)
        # Seven QuantityNode values; units and the VAT switch are static
        assert len(leaves) == 7


class TestLineItemFees:
    """Tests for the per-unit fee kernel."""

    @pytest.fixture
    def runtime(self):
        return DEFAULT_FEE_SCHEDULE.to_runtime()

    def test_standard_tier(self, runtime, close):
        fees = line_item_fees(runtime, jnp.asarray(2000.0))
        assert int(fees.tier) == STANDARD_CODE
        close(fees.service_fee, 200.0)
        close(fees.vat, 15.0)
        close(fees.total_fee, 215.0)

    def test_premium_tier(self, runtime, close):
        fees = line_item_fees(runtime, jnp.asarray(10000.0))
        assert int(fees.tier) == PREMIUM_CODE
        close(fees.service_fee, 750.0)
        close(fees.vat, 56.25)

    def test_threshold_is_standard(self, runtime, close):
        at = line_item_fees(runtime, jnp.asarray(5000.0))
        above = line_item_fees(runtime, jnp.asarray(5000.01))
        assert int(at.tier) == STANDARD_CODE
        assert int(above.tier) == PREMIUM_CODE
        close(at.service_fee, 500.0)
        close(above.service_fee, 5000.01 * 0.07 + 50)

    def test_free_ticket(self, runtime):
        fees = line_item_fees(runtime, jnp.asarray(0.0))
        assert float(fees.service_fee) == 0.0
        assert float(fees.vat) == 0.0
        assert int(fees.tier) == STANDARD_CODE

    def test_vectorised(self, runtime, array_close):
        prices = jnp.array([0.0, 2000.0, 5000.0, 5001.0, 10000.0])
        fees = line_item_fees(runtime, prices)

        assert fees.service_fee.shape == prices.shape
        assert fees.tier.tolist() == [0, 0, 0, 1, 1]
        array_close(fees.service_fee, [0.0, 200.0, 500.0, 5001.0 * 0.07 + 50, 750.0])
        array_close(fees.vat, fees.service_fee * 0.075)

    def test_float64(self, runtime):
        fees = line_item_fees(runtime, jnp.array([2000.0]))
        assert fees.service_fee.dtype == jnp.float64

    def test_jit(self, runtime, array_close):
        prices = jnp.array([2000.0, 10000.0])
        eager = line_item_fees(runtime, prices)
        compiled = jax.jit(line_item_fees)(runtime, prices)
        array_close(compiled.total_fee, eager.total_fee)
        assert compiled.tier.tolist() == eager.tier.tolist()

    def test_vat_included_in_standard_rate(self, close):
        runtime = FeeScheduleConfig(vat_on_standard_tier=False).to_runtime()
        standard = line_item_fees(runtime, jnp.asarray(2000.0))
        premium = line_item_fees(runtime, jnp.asarray(10000.0))
        close(standard.service_fee, 200.0)
        assert float(standard.vat) == 0.0
        close(premium.vat, 56.25)


class TestCartFeeTotals:
    """Tests for quantity scaling over a cart."""

    def test_scaled_by_quantity(self, array_close):
        runtime = DEFAULT_FEE_SCHEDULE.to_runtime()
        fees, subtotals = cart_fee_totals(
            runtime, jnp.array([2000.0, 10000.0]), jnp.array([1, 2])
        )
        array_close(subtotals, [2000.0, 20000.0])
        array_close(fees.service_fee, [200.0, 1500.0])
        array_close(fees.vat, [15.0, 112.5])
        assert fees.tier.tolist() == [STANDARD_CODE, PREMIUM_CODE]


class TestGatewayFee:
    """Tests for the payment gateway charge."""

    def test_rounded_to_whole_naira(self):
        runtime = DEFAULT_FEE_SCHEDULE.to_runtime()
        # 2215 * 1.5% + 100 = 133.225
        assert float(gateway_fee(runtime, jnp.asarray(2215.0))) == 133.0
        # 21612.5 * 1.5% + 100 = 424.1875
        assert float(gateway_fee(runtime, jnp.asarray(21612.5))) == 424.0

    def test_nothing_charged_on_zero(self):
        runtime = DEFAULT_FEE_SCHEDULE.to_runtime()
        assert float(gateway_fee(runtime, jnp.asarray(0.0))) == 0.0


class TestTier:
    """Tests for Tier wire values."""

    def test_wire_values(self):
        assert Tier.STANDARD.value == "small"
        assert Tier.PREMIUM.value == "premium"
        assert str(Tier.PREMIUM) == "premium"

    def test_from_code(self):
        assert Tier.from_code(STANDARD_CODE) is Tier.STANDARD
        assert Tier.from_code(PREMIUM_CODE) is Tier.PREMIUM
        with pytest.raises(ValueError):
            Tier.from_code(7)
