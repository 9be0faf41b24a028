from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class PaymentCustomer:
    email: str
    name: str
    phone: str | None = None


@dataclass(frozen=True)
class PaymentAuthorization:
    payment_intent_id: str
    checkout_url: str


class PaymentGateway:
    async def authorize(
        self,
        amount: Decimal,
        customer: PaymentCustomer,
        idempotency_key: str,
        metadata: dict[str, Any],
    ) -> PaymentAuthorization:
        """
        Raises:
            PaymentAuthorizationError: ante cualquier falla o timeout.
        """
        raise NotImplementedError
