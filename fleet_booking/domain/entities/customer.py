"""Entidad Customer - cliente registrado."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Customer:
    """Cliente registrado de la plataforma."""

    id: str
    email: str
    name: str
    phone: str | None = None
    referred_by_customer_id: str | None = None
    referral_discount_used: bool = False
    credits_balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class CustomerReferralState:
    """Campos de elegibilidad del descuento de referido de un cliente."""

    customer_id: str
    referred_by_customer_id: str | None
    referral_discount_used: bool

    @property
    def can_use_discount(self) -> bool:
        return bool(self.referred_by_customer_id) and not self.referral_discount_used
