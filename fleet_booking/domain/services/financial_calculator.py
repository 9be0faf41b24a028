"""
Cálculo del desglose financiero de una reserva.

El orden de las etapas es parte del contrato: cada etapa usa el resultado ya
redondeado / acotado de la anterior.

    1. precio por tramo          7. créditos (tope: saldo y remanente)
    2. escolta y tanque lleno    8. IVA
    3. base de la comisión       9. total
    4. comisión de servicio     10. comisión al dueño de la flota
    5. subtotal                 11. pago neto al dueño de la flota
    6. descuento de referido
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from fleet_booking.domain.constants import MAX_LEGS_FOR_FUEL_UPGRADE, MONEY_QUANTUM
from fleet_booking.domain.entities.booking import BookingType
from fleet_booking.domain.entities.vehicle import VehiclePricing
from fleet_booking.domain.errors import InternalInconsistency
from fleet_booking.domain.value_objects.leg import Leg
from fleet_booking.domain.value_objects.platform_rates import PlatformRates

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LegPrice:
    leg_date: datetime
    price: Decimal


@dataclass(frozen=True)
class FinancialBreakdown:
    """Desglose completo e inmutable; todos los montos son Decimal."""

    # Tramos
    leg_prices: tuple[LegPrice, ...]
    number_of_legs: int
    net_total: Decimal

    # Adicionales
    security_detail_cost: Decimal
    fuel_upgrade_cost: Decimal
    net_total_with_addons: Decimal

    # Comisión de servicio (paga el cliente)
    platform_fee_base: Decimal
    platform_customer_service_fee_rate_percent: Decimal
    platform_customer_service_fee_amount: Decimal

    # Subtotales
    subtotal_before_discounts: Decimal
    referral_discount_amount: Decimal
    credits_used: Decimal
    subtotal_after_discounts: Decimal

    # IVA y total
    vat_rate_percent: Decimal
    vat_amount: Decimal
    total_amount: Decimal

    # Dueño de la flota
    platform_fleet_owner_commission_rate_percent: Decimal
    platform_fleet_owner_commission_amount: Decimal
    fleet_owner_payout_amount_net: Decimal


@dataclass(frozen=True)
class LegSplit:
    """Reparto uniforme por tramo de los montos agregados."""

    net_per_leg: Decimal
    commission_per_leg: Decimal
    earnings_per_leg: Decimal


def calculate_booking_cost(
    booking_type: BookingType,
    legs: Sequence[Leg],
    pricing: VehiclePricing,
    rates: PlatformRates,
    include_security_detail: bool,
    requires_full_tank: bool,
    referral_discount_amount: Decimal | None = None,
    credits_to_use: Decimal | None = None,
    user_credits_balance: Decimal | None = None,
) -> FinancialBreakdown:
    """Calcula el desglose completo; determinista para entradas idénticas."""
    rate_per_leg = rate_for_booking_type(booking_type, pricing)
    leg_prices = tuple(LegPrice(leg_date=leg.leg_date, price=rate_per_leg) for leg in legs)
    number_of_legs = len(leg_prices)
    net_total = sum((lp.price for lp in leg_prices), ZERO)

    security_detail_cost = (
        rates.security_detail_rate * number_of_legs if include_security_detail else ZERO
    )
    fuel_upgrade_cost = fuel_upgrade_cost_for(pricing, requires_full_tank, number_of_legs)
    net_total_with_addons = net_total + security_detail_cost + fuel_upgrade_cost

    # La escolta es un costo de paso: no genera comisión
    platform_fee_base = net_total + fuel_upgrade_cost
    fee_rate = rates.customer_service_fee_rate_percent
    fee_amount = _percent_of(platform_fee_base, fee_rate)

    subtotal_before_discounts = net_total_with_addons + fee_amount

    effective_referral = apply_discount(referral_discount_amount or ZERO, subtotal_before_discounts)
    after_referral = subtotal_before_discounts - effective_referral

    effective_credits = effective_credits_for(
        credits_to_use or ZERO, user_credits_balance or ZERO, after_referral
    )
    subtotal_after_discounts = after_referral - effective_credits

    vat_rate = rates.vat_rate_percent
    vat_amount = _percent_of(subtotal_after_discounts, vat_rate)
    total_amount = subtotal_after_discounts + vat_amount

    # Comisión solo sobre los tramos; el combustible va a recarga y la escolta es de paso
    commission_rate = rates.fleet_owner_commission_rate_percent
    commission_amount = _percent_of(net_total, commission_rate)
    payout = net_total + security_detail_cost - commission_amount

    return FinancialBreakdown(
        leg_prices=leg_prices,
        number_of_legs=number_of_legs,
        net_total=net_total,
        security_detail_cost=security_detail_cost,
        fuel_upgrade_cost=fuel_upgrade_cost,
        net_total_with_addons=net_total_with_addons,
        platform_fee_base=platform_fee_base,
        platform_customer_service_fee_rate_percent=fee_rate,
        platform_customer_service_fee_amount=fee_amount,
        subtotal_before_discounts=subtotal_before_discounts,
        referral_discount_amount=effective_referral,
        credits_used=effective_credits,
        subtotal_after_discounts=subtotal_after_discounts,
        vat_rate_percent=vat_rate,
        vat_amount=vat_amount,
        total_amount=total_amount,
        platform_fleet_owner_commission_rate_percent=commission_rate,
        platform_fleet_owner_commission_amount=commission_amount,
        fleet_owner_payout_amount_net=payout,
    )


def rate_for_booking_type(booking_type: BookingType, pricing: VehiclePricing) -> Decimal:
    if booking_type == BookingType.DAY:
        return pricing.day_rate
    if booking_type == BookingType.NIGHT:
        return pricing.night_rate
    if booking_type == BookingType.FULL_DAY:
        return pricing.full_day_rate
    if booking_type == BookingType.AIRPORT_PICKUP:
        return pricing.airport_pickup_rate
    raise ValueError(f"Unknown booking type: {booking_type}")


def fuel_upgrade_cost_for(
    pricing: VehiclePricing,
    requires_full_tank: bool,
    number_of_legs: int,
) -> Decimal:
    """
    El tanque lleno se cobra solo si el precio no incluye combustible, el
    cliente lo pidió, la reserva tiene 1 o 2 tramos y la tarifa es positiva.
    """
    is_eligible = (
        not pricing.pricing_includes_fuel
        and requires_full_tank
        and 0 < number_of_legs <= MAX_LEGS_FOR_FUEL_UPGRADE
        and pricing.fuel_upgrade_rate is not None
        and pricing.fuel_upgrade_rate > 0
    )
    if not is_eligible:
        return ZERO
    return pricing.fuel_upgrade_rate


def apply_discount(discount: Decimal, available_amount: Decimal) -> Decimal:
    if discount <= 0:
        return ZERO
    return min(discount, available_amount)


def effective_credits_for(
    credits_to_use: Decimal,
    user_balance: Decimal,
    remaining_subtotal: Decimal,
) -> Decimal:
    if credits_to_use <= 0 or user_balance <= 0:
        return ZERO
    return min(credits_to_use, user_balance, remaining_subtotal)


def split_per_leg(breakdown: FinancialBreakdown) -> LegSplit:
    """
    Reparte el neto y la comisión en partes iguales por tramo.

    Raises:
        InternalInconsistency: si la reserva no tiene tramos.
    """
    if breakdown.number_of_legs <= 0:
        raise InternalInconsistency(
            "Cannot create booking: number of legs must be greater than zero"
        )
    net_per_leg = quantize_money(breakdown.net_total / breakdown.number_of_legs)
    commission_per_leg = quantize_money(
        breakdown.platform_fleet_owner_commission_amount / breakdown.number_of_legs
    )
    return LegSplit(
        net_per_leg=net_per_leg,
        commission_per_leg=commission_per_leg,
        earnings_per_leg=net_per_leg - commission_per_leg,
    )


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _percent_of(amount: Decimal, rate_percent: Decimal) -> Decimal:
    return quantize_money(amount * rate_percent / HUNDRED)
