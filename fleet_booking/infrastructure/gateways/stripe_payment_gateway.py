import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import stripe

from fleet_booking.application.interfaces.payment_gateway import (
    PaymentAuthorization,
    PaymentCustomer,
    PaymentGateway,
)
from fleet_booking.domain.errors import PaymentAuthorizationError
from fleet_booking.infrastructure.circuit_breaker import CircuitBreakerError, payment_breaker

logger = logging.getLogger(__name__)

ZERO_DECIMAL_CURRENCIES = frozenset({"BIF", "CLP", "JPY", "KRW", "PYG", "RWF", "UGX", "VND", "XAF", "XOF"})


def to_minor_units(amount: Decimal, currency: str) -> int:
    """Importe en la unidad mínima de la moneda (p.ej. kobo para NGN)."""
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripePaymentGateway(PaymentGateway):
    def __init__(
        self,
        api_key: str | None,
        currency: str,
        success_url: str,
        cancel_url: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        stripe.api_key = api_key
        stripe.max_network_retries = 2
        self._currency = currency.lower()
        self._success_url = success_url
        self._cancel_url = cancel_url
        self._timeout_seconds = timeout_seconds

    async def authorize(
        self,
        amount: Decimal,
        customer: PaymentCustomer,
        idempotency_key: str,
        metadata: dict[str, Any],
    ) -> PaymentAuthorization:
        """
        Create a Checkout Session, protected by the circuit breaker.

        The Stripe SDK is synchronous; the call runs in a worker thread and is
        bounded by `timeout_seconds`.
        """
        str_metadata = {k: str(v) for k, v in metadata.items()}
        params = {
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": self._currency,
                        "unit_amount": to_minor_units(amount, self._currency),
                        "product_data": {
                            "name": f"Booking {metadata.get('booking_reference', idempotency_key)}",
                        },
                    },
                    "quantity": 1,
                }
            ],
            "customer_email": customer.email,
            "metadata": str_metadata,
            "payment_intent_data": {"metadata": str_metadata},
            "success_url": self._success_url,
            "cancel_url": self._cancel_url,
            "idempotency_key": idempotency_key,
        }

        try:
            session = await asyncio.wait_for(
                asyncio.to_thread(payment_breaker.call, stripe.checkout.Session.create, **params),
                timeout=self._timeout_seconds,
            )
        except CircuitBreakerError as e:
            logger.error(
                "Payment circuit breaker is open - service unavailable",
                extra={"idempotency_key": idempotency_key, "circuit_state": str(e)},
            )
            raise PaymentAuthorizationError("Payment service is temporarily unavailable") from e
        except asyncio.TimeoutError as e:
            logger.error(
                "Stripe checkout session timed out",
                extra={"idempotency_key": idempotency_key, "timeout_seconds": self._timeout_seconds},
            )
            raise PaymentAuthorizationError("Payment provider timed out") from e
        except stripe.StripeError as e:
            logger.error(
                "Stripe API error",
                exc_info=e,
                extra={"idempotency_key": idempotency_key},
            )
            raise PaymentAuthorizationError() from e

        if not session.url:
            raise PaymentAuthorizationError("Payment provider returned no checkout URL")

        return PaymentAuthorization(
            payment_intent_id=session.payment_intent or session.id,
            checkout_url=session.url,
        )
