import time
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from fleet_booking.application.interfaces.payment_gateway import PaymentCustomer
from fleet_booking.domain.errors import PaymentAuthorizationError
from fleet_booking.infrastructure.circuit_breaker import payment_breaker
from fleet_booking.infrastructure.gateways.stripe_payment_gateway import (
    StripePaymentGateway,
    to_minor_units,
)

CUSTOMER = PaymentCustomer(email="guest@example.com", name="Guest Person", phone="+234")
METADATA = {"booking_id": "b-1", "booking_reference": "BK-ABCD1234", "booking_type": "DAY"}


def make_gateway(timeout_seconds: float = 5.0) -> StripePaymentGateway:
    return StripePaymentGateway(
        api_key="sk_test_dummy",
        currency="NGN",
        success_url="https://app.test/success",
        cancel_url="https://app.test/cancel",
        timeout_seconds=timeout_seconds,
    )


def checkout_session(**overrides):
    values = {"id": "cs_test_1", "url": "https://checkout.stripe.test/cs_test_1", "payment_intent": "pi_1"}
    values.update(overrides)
    return SimpleNamespace(**values)


class TestMinorUnits:
    def test_two_decimal_currency(self):
        assert to_minor_units(Decimal("140825"), "ngn") == 14082500

    def test_half_cent_rounds_up(self):
        assert to_minor_units(Decimal("10.005"), "USD") == 1001

    def test_zero_decimal_currency(self):
        assert to_minor_units(Decimal("1500.5"), "jpy") == 1501


class TestAuthorize:
    async def test_creates_checkout_session_with_idempotency_key(self):
        with patch("stripe.checkout.Session.create", return_value=checkout_session()) as create:
            authorization = await make_gateway().authorize(
                amount=Decimal("140825"),
                customer=CUSTOMER,
                idempotency_key="b-1",
                metadata=METADATA,
            )

        assert authorization.payment_intent_id == "pi_1"
        assert authorization.checkout_url == "https://checkout.stripe.test/cs_test_1"

        params = create.call_args.kwargs
        assert params["idempotency_key"] == "b-1"
        assert params["mode"] == "payment"
        assert params["customer_email"] == "guest@example.com"
        price_data = params["line_items"][0]["price_data"]
        assert price_data["currency"] == "ngn"
        assert price_data["unit_amount"] == 14082500
        assert params["metadata"]["booking_reference"] == "BK-ABCD1234"

    async def test_session_id_used_when_no_payment_intent_yet(self):
        with patch("stripe.checkout.Session.create", return_value=checkout_session(payment_intent=None)):
            authorization = await make_gateway().authorize(Decimal("10"), CUSTOMER, "b-1", METADATA)

        assert authorization.payment_intent_id == "cs_test_1"

    async def test_missing_checkout_url_is_a_failure(self):
        with patch("stripe.checkout.Session.create", return_value=checkout_session(url=None)):
            with pytest.raises(PaymentAuthorizationError):
                await make_gateway().authorize(Decimal("10"), CUSTOMER, "b-1", METADATA)

    async def test_stripe_error_becomes_payment_authorization_error(self):
        with patch("stripe.checkout.Session.create", side_effect=stripe.StripeError("card_declined")):
            with pytest.raises(PaymentAuthorizationError) as exc_info:
                await make_gateway().authorize(Decimal("10"), CUSTOMER, "b-1", METADATA)

        assert exc_info.value.retryable is True
        assert isinstance(exc_info.value.__cause__, stripe.StripeError)

    async def test_timeout_becomes_payment_authorization_error(self):
        def slow_create(**params):
            time.sleep(0.3)
            return checkout_session()

        with patch("stripe.checkout.Session.create", side_effect=slow_create):
            with pytest.raises(PaymentAuthorizationError, match="timed out"):
                await make_gateway(timeout_seconds=0.05).authorize(Decimal("10"), CUSTOMER, "b-1", METADATA)

    async def test_open_circuit_fails_fast(self):
        payment_breaker.open()

        with patch("stripe.checkout.Session.create", return_value=checkout_session()) as create:
            with pytest.raises(PaymentAuthorizationError, match="temporarily unavailable"):
                await make_gateway().authorize(Decimal("10"), CUSTOMER, "b-1", METADATA)

        create.assert_not_called()

    async def test_repeated_failures_open_the_circuit(self):
        gateway = make_gateway()

        with patch("stripe.checkout.Session.create", side_effect=stripe.StripeError("down")):
            for _ in range(payment_breaker.fail_max):
                with pytest.raises(PaymentAuthorizationError):
                    await gateway.authorize(Decimal("10"), CUSTOMER, "b-1", METADATA)

        assert payment_breaker.current_state == "open"
