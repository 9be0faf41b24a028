"""
Tests del calculador financiero.

Los escenarios completos usan tarifas redondas para poder verificar cada
etapa del desglose a mano.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from fleet_booking.domain.entities.booking import BookingType
from fleet_booking.domain.errors import InternalInconsistency
from fleet_booking.domain.services.financial_calculator import (
    calculate_booking_cost,
    fuel_upgrade_cost_for,
    split_per_leg,
)
from fleet_booking.domain.value_objects.leg import Leg
from tests.factories import DEFAULT_PRICING, DEFAULT_RATES


def legs(count: int) -> list[Leg]:
    base = datetime(2030, 1, 12, 9, tzinfo=timezone.utc)
    return [
        Leg(
            leg_date=base + timedelta(days=i),
            leg_start_time=base + timedelta(days=i),
            leg_end_time=base + timedelta(days=i, hours=12),
        )
        for i in range(count)
    ]


def calculate(booking_type=BookingType.DAY, count=2, pricing=DEFAULT_PRICING, **kwargs):
    params = {
        "include_security_detail": False,
        "requires_full_tank": False,
    }
    params.update(kwargs)
    return calculate_booking_cost(
        booking_type=booking_type,
        legs=legs(count),
        pricing=pricing,
        rates=DEFAULT_RATES,
        **params,
    )


class TestFullBreakdown:
    def test_day_booking_with_security_and_full_tank(self):
        breakdown = calculate(include_security_detail=True, requires_full_tank=True)

        assert breakdown.number_of_legs == 2
        assert breakdown.net_total == Decimal("100000")
        assert breakdown.security_detail_cost == Decimal("10000")
        assert breakdown.fuel_upgrade_cost == Decimal("10000")
        assert breakdown.platform_fee_base == Decimal("110000")
        assert breakdown.platform_customer_service_fee_amount == Decimal("11000.00")
        assert breakdown.subtotal_before_discounts == Decimal("131000")
        assert breakdown.subtotal_after_discounts == Decimal("131000")
        assert breakdown.vat_amount == Decimal("9825.00")
        assert breakdown.total_amount == Decimal("140825")
        assert breakdown.platform_fleet_owner_commission_amount == Decimal("5000.00")
        assert breakdown.fleet_owner_payout_amount_net == Decimal("105000")

    def test_airport_pickup_discount_and_credits_reduce_total_to_zero(self):
        breakdown = calculate(
            booking_type=BookingType.AIRPORT_PICKUP,
            count=1,
            referral_discount_amount=Decimal("20000"),
            credits_to_use=Decimal("50000"),
            user_credits_balance=Decimal("50000"),
        )

        assert breakdown.subtotal_before_discounts == Decimal("27500")
        assert breakdown.referral_discount_amount == Decimal("20000")
        assert breakdown.credits_used == Decimal("7500")
        assert breakdown.subtotal_after_discounts == Decimal("0")
        assert breakdown.vat_amount == Decimal("0")
        assert breakdown.total_amount == Decimal("0")

    def test_same_inputs_give_same_breakdown(self):
        assert calculate(include_security_detail=True) == calculate(include_security_detail=True)


class TestDiscountCaps:
    def test_discount_larger_than_subtotal_is_capped(self):
        breakdown = calculate(
            booking_type=BookingType.AIRPORT_PICKUP,
            count=1,
            referral_discount_amount=Decimal("100000"),
        )

        assert breakdown.referral_discount_amount == Decimal("27500")
        assert breakdown.subtotal_after_discounts == Decimal("0")
        assert breakdown.vat_amount == Decimal("0")

    def test_credits_capped_by_balance(self):
        breakdown = calculate(
            credits_to_use=Decimal("50000"),
            user_credits_balance=Decimal("3000"),
        )
        assert breakdown.credits_used == Decimal("3000")
        assert breakdown.subtotal_after_discounts == Decimal("107000")

    def test_credits_without_balance_are_ignored(self):
        breakdown = calculate(credits_to_use=Decimal("5000"), user_credits_balance=None)
        assert breakdown.credits_used == Decimal("0")

    def test_negative_discount_is_ignored(self):
        breakdown = calculate(referral_discount_amount=Decimal("-10"))
        assert breakdown.referral_discount_amount == Decimal("0")

    def test_subtotals_never_go_negative(self):
        breakdown = calculate(
            referral_discount_amount=Decimal("999999"),
            credits_to_use=Decimal("999999"),
            user_credits_balance=Decimal("999999"),
        )
        assert breakdown.subtotal_after_discounts >= 0
        assert breakdown.total_amount >= 0
        assert breakdown.credits_used == Decimal("0")


class TestFuelUpgrade:
    def test_charged_for_one_or_two_legs(self):
        assert fuel_upgrade_cost_for(DEFAULT_PRICING, True, 1) == Decimal("10000")
        assert fuel_upgrade_cost_for(DEFAULT_PRICING, True, 2) == Decimal("10000")

    def test_zero_for_more_than_two_legs(self):
        breakdown = calculate(count=3, requires_full_tank=True)
        assert breakdown.fuel_upgrade_cost == Decimal("0")

    def test_zero_when_pricing_includes_fuel(self):
        pricing = replace(DEFAULT_PRICING, pricing_includes_fuel=True)
        assert calculate(pricing=pricing, requires_full_tank=True).fuel_upgrade_cost == Decimal("0")

    @pytest.mark.parametrize("rate", [None, Decimal("0")])
    def test_zero_when_rate_missing_or_zero(self, rate):
        pricing = replace(DEFAULT_PRICING, fuel_upgrade_rate=rate)
        assert calculate(pricing=pricing, requires_full_tank=True).fuel_upgrade_cost == Decimal("0")

    def test_zero_when_not_requested(self):
        assert calculate(requires_full_tank=False).fuel_upgrade_cost == Decimal("0")

    def test_fuel_is_excluded_from_commission_and_payout(self):
        with_fuel = calculate(requires_full_tank=True)
        without_fuel = calculate(requires_full_tank=False)

        assert with_fuel.platform_fleet_owner_commission_amount == without_fuel.platform_fleet_owner_commission_amount
        assert with_fuel.fleet_owner_payout_amount_net == without_fuel.fleet_owner_payout_amount_net


def test_security_detail_is_not_commissionable():
    breakdown = calculate(include_security_detail=True)

    assert breakdown.platform_fee_base == breakdown.net_total
    assert breakdown.fleet_owner_payout_amount_net == Decimal("105000")


class TestSplitPerLeg:
    def test_even_split_quantized_to_cents(self):
        split = split_per_leg(calculate(count=3))

        assert split.net_per_leg == Decimal("50000.00")
        assert split.commission_per_leg == Decimal("2500.00")
        assert split.earnings_per_leg == Decimal("47500.00")

    def test_uneven_amounts_round_half_up(self):
        pricing = replace(DEFAULT_PRICING, day_rate=Decimal("33333.34"))
        split = split_per_leg(calculate(count=3, pricing=pricing))

        assert split.net_per_leg == Decimal("33333.34")
        assert split.commission_per_leg == Decimal("1666.67")
        assert split.earnings_per_leg == Decimal("31666.67")

    def test_zero_legs_fail_loudly(self):
        breakdown = calculate(count=0)

        with pytest.raises(InternalInconsistency):
            split_per_leg(breakdown)
