from decimal import Decimal
from typing import Any

from fleet_booking.application.interfaces.payment_gateway import (
    PaymentAuthorization,
    PaymentCustomer,
    PaymentGateway,
)
from fleet_booking.domain.errors import PaymentAuthorizationError


class StubPaymentGateway(PaymentGateway):
    """Devuelve sesiones de checkout falsas y deterministas."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[dict[str, Any]] = []

    async def authorize(
        self,
        amount: Decimal,
        customer: PaymentCustomer,
        idempotency_key: str,
        metadata: dict[str, Any],
    ) -> PaymentAuthorization:
        self.calls.append(
            {
                "amount": amount,
                "customer": customer,
                "idempotency_key": idempotency_key,
                "metadata": metadata,
            }
        )
        if self.fail:
            raise PaymentAuthorizationError("Stub payment gateway rejected the request")
        return PaymentAuthorization(
            payment_intent_id=f"pi_stub_{idempotency_key}",
            checkout_url=f"https://checkout.stub.local/{idempotency_key}",
        )
