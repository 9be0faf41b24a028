import asyncio
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Awaitable, Callable, TypeVar

from fleet_booking.application.dtos.booking_dto import (
    CreateBookingRequestDTO,
    CreateBookingResultDTO,
)
from fleet_booking.application.interfaces.booking_repo import BookingRepo
from fleet_booking.application.interfaces.customer_repo import CustomerRepo
from fleet_booking.application.interfaces.flight_repo import FlightRepo
from fleet_booking.application.interfaces.flight_resolver import FlightResolver
from fleet_booking.application.interfaces.id_generator import IdGenerator
from fleet_booking.application.interfaces.payment_gateway import (
    PaymentCustomer,
    PaymentGateway,
)
from fleet_booking.application.interfaces.rate_provider import RateProvider
from fleet_booking.application.interfaces.transaction_manager import TransactionManager
from fleet_booking.application.interfaces.vehicle_repo import VehicleRepo
from fleet_booking.application.services.booking_validation import (
    BookingValidator,
    resolve_identity,
)
from fleet_booking.application.services.referral_discount import (
    ReferralClaim,
    ReferralClaimState,
    ReferralDiscountClaimer,
)
from fleet_booking.domain.constants import (
    PAYMENT_STATUS_FAILED,
    REFERRAL_STATUS_APPLIED,
    REFERRAL_STATUS_NONE,
)
from fleet_booking.domain.entities.booking import Booking, BookingLegRecord, BookingType
from fleet_booking.domain.entities.flight import FlightContext
from fleet_booking.domain.errors import (
    BookingCreationFailedError,
    CustomerNotFoundError,
    DomainError,
    FieldError,
    PaymentAuthorizationError,
    PaymentIntentNotRecordedError,
    ValidationFailure,
    VehicleNotFoundError,
)
from fleet_booking.domain.services.financial_calculator import (
    FinancialBreakdown,
    calculate_booking_cost,
    split_per_leg,
)
from fleet_booking.domain.services.leg_generator import generate_legs
from fleet_booking.domain.value_objects.identity import (
    AuthenticatedCustomer,
    BookingIdentity,
)
from fleet_booking.domain.value_objects.leg import Leg
from fleet_booking.domain.value_objects.time_window import as_utc

T = TypeVar("T")

CommitRunner = Callable[[Callable[[], Awaitable[T]]], Awaitable[T]]

# Strong references to fire-and-forget tasks until they finish
_background_tasks: set[asyncio.Task] = set()


async def _run_once(func: Callable[[], Awaitable[T]]) -> T:
    return await func()


async def drain_background_tasks() -> None:
    """Wait for pending fire-and-forget tasks (shutdown and tests)."""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)


@dataclass(frozen=True)
class _PaymentContext:
    customer: PaymentCustomer
    credits_balance: Decimal | None


class CreateBookingUseCase:
    """
    Booking creation saga.

    Validation, pricing and the preliminary referral check run before any
    write. One transaction then claims the referral discount and persists
    the booking. The payment gateway is called only after that transaction
    commits; a payment failure is compensated by marking the booking's
    payment status FAILED, never by deleting the booking.
    """

    def __init__(
        self,
        validator: BookingValidator,
        referral_claimer: ReferralDiscountClaimer,
        vehicle_repo: VehicleRepo,
        booking_repo: BookingRepo,
        customer_repo: CustomerRepo,
        flight_repo: FlightRepo,
        rate_provider: RateProvider,
        flight_resolver: FlightResolver,
        payment_gateway: PaymentGateway,
        transaction_manager: TransactionManager,
        id_generator: IdGenerator,
        commit_runner: CommitRunner | None = None,
    ) -> None:
        self._validator = validator
        self._referral_claimer = referral_claimer
        self._vehicle_repo = vehicle_repo
        self._booking_repo = booking_repo
        self._customer_repo = customer_repo
        self._flight_repo = flight_repo
        self._rate_provider = rate_provider
        self._flight_resolver = flight_resolver
        self._payment_gateway = payment_gateway
        self._transaction_manager = transaction_manager
        self._id_generator = id_generator
        self._commit_runner = commit_runner or _run_once
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        request: CreateBookingRequestDTO,
        customer_id: str | None = None,
    ) -> CreateBookingResultDTO:
        # Desde aquí todas las fechas son aware en UTC, también las persistidas
        request = replace(
            request,
            start_date=as_utc(request.start_date),
            end_date=as_utc(request.end_date),
        )
        identity = resolve_identity(
            customer_id,
            request.guest_email,
            request.guest_name,
            request.guest_phone,
        )
        log_ctx = {
            "vehicle_id": request.vehicle_id,
            "booking_type": request.booking_type.value,
            "is_guest": not isinstance(identity, AuthenticatedCustomer),
        }
        self._logger.info("Starting booking creation", extra={**log_ctx, "stage": "start"})

        # 1. Validación (sin escrituras)
        self._validator.validate_dates(request.booking_type, request.start_date, request.end_date)
        await self._validator.check_vehicle_availability(
            request.vehicle_id, request.start_date, request.end_date
        )
        await self._validator.validate_guest_email(identity)

        flight = await self._resolve_flight(request)

        # 2. Tarifas y precio del vehículo (independientes entre sí)
        rates, pricing = await asyncio.gather(
            self._rate_provider.get_current_rates(),
            self._vehicle_repo.get_pricing(request.vehicle_id),
        )
        if pricing is None:
            raise VehicleNotFoundError(request.vehicle_id)

        payment_ctx = await self._load_payment_context(identity)
        preliminary = await self._referral_claimer.check_preliminary(
            identity.customer_id if isinstance(identity, AuthenticatedCustomer) else None
        )

        # 3. Tramos y desglose
        legs = self._generate_legs(request, flight)
        breakdown = calculate_booking_cost(
            booking_type=request.booking_type,
            legs=legs,
            pricing=pricing,
            rates=rates,
            include_security_detail=request.include_security_detail,
            requires_full_tank=request.requires_full_tank,
            referral_discount_amount=(
                preliminary.discount_amount if preliminary.is_discount_applied else None
            ),
            credits_to_use=request.use_credits,
            user_credits_balance=payment_ctx.credits_balance,
        )
        self._validator.validate_price_match(request.client_total_amount, breakdown.total_amount)

        # 4. Transacción de alta
        booking_id = self._id_generator.generate_booking_id()
        booking_reference = self._id_generator.generate_booking_reference()
        log_ctx["booking_reference"] = booking_reference

        async def commit() -> Booking:
            async with self._transaction_manager.start():
                return await self._persist_booking(
                    booking_id=booking_id,
                    booking_reference=booking_reference,
                    request=request,
                    identity=identity,
                    legs=legs,
                    breakdown=breakdown,
                    preliminary=preliminary,
                    flight=flight,
                )

        try:
            booking = await self._commit_runner(commit)
        except DomainError as exc:
            self._logger.warning(
                "Booking transaction aborted",
                extra={**log_ctx, "stage": "commit", "error_code": exc.code},
            )
            raise
        except Exception as exc:
            self._logger.error(
                "Booking creation transaction failed",
                exc_info=exc,
                extra={**log_ctx, "stage": "commit"},
            )
            raise BookingCreationFailedError() from exc

        self._logger.info(
            "Booking committed",
            extra={**log_ctx, "stage": "committed", "booking_id": booking.id},
        )

        # 5. Pago (fuera de la transacción)
        checkout_url = await self._authorize_payment(booking, payment_ctx.customer, log_ctx)

        # 6. Alerta de vuelo (fire-and-forget)
        if flight is not None and booking.flight_id:
            self._schedule_flight_alert(booking, flight)

        self._logger.info(
            "Booking created",
            extra={**log_ctx, "stage": "done", "booking_id": booking.id},
        )
        return CreateBookingResultDTO(
            booking_id=booking.id,
            booking_reference=booking.booking_reference,
            checkout_url=checkout_url,
            total_amount=booking.total_amount,
        )

    async def _resolve_flight(self, request: CreateBookingRequestDTO) -> FlightContext | None:
        if request.booking_type != BookingType.AIRPORT_PICKUP or not request.flight_number:
            return None
        return await self._flight_resolver.resolve(
            request.flight_number,
            request.start_date.date(),
            request.drop_off_address,
        )

    async def _load_payment_context(self, identity: BookingIdentity) -> _PaymentContext:
        if isinstance(identity, AuthenticatedCustomer):
            customer = await self._customer_repo.get_by_id(identity.customer_id)
            if customer is None:
                raise CustomerNotFoundError(identity.customer_id)
            return _PaymentContext(
                customer=PaymentCustomer(email=customer.email, name=customer.name, phone=customer.phone),
                credits_balance=customer.credits_balance,
            )
        return _PaymentContext(
            customer=PaymentCustomer(email=identity.email, name=identity.name, phone=identity.phone),
            credits_balance=None,
        )

    def _generate_legs(
        self,
        request: CreateBookingRequestDTO,
        flight: FlightContext | None,
    ) -> list[Leg]:
        try:
            return generate_legs(
                booking_type=request.booking_type,
                start_date=request.start_date,
                end_date=request.end_date,
                pickup_time=request.pickup_time,
                flight_arrival_time=flight.arrival_time if flight else None,
                drive_time_minutes=flight.drive_time_minutes if flight else None,
            )
        except ValueError as exc:
            raise ValidationFailure([FieldError("pickup_time", str(exc))]) from exc

    async def _persist_booking(
        self,
        booking_id: str,
        booking_reference: str,
        request: CreateBookingRequestDTO,
        identity: BookingIdentity,
        legs: list[Leg],
        breakdown: FinancialBreakdown,
        preliminary: ReferralClaim,
        flight: FlightContext | None,
    ) -> Booking:
        # El reclamo va primero: ninguna otra escritura antes del bloqueo
        claim = await self._referral_claimer.claim(preliminary)
        is_claimed = claim.state == ReferralClaimState.CLAIMED

        split = split_per_leg(breakdown)

        flight_id = None
        if flight is not None:
            flight_id = await self._flight_repo.upsert(flight)

        booking = Booking(
            id=booking_id,
            booking_reference=booking_reference,
            vehicle_id=request.vehicle_id,
            booking_type=request.booking_type,
            start_date=request.start_date,
            end_date=request.end_date,
            pickup_location=request.pickup_address,
            return_location=request.return_location,
            flight_number=request.flight_number,
            flight_id=flight_id,
            special_requests=request.special_requests,
            total_amount=breakdown.total_amount,
            net_total=breakdown.net_total,
            security_detail_cost=breakdown.security_detail_cost or None,
            fuel_upgrade_cost=breakdown.fuel_upgrade_cost or None,
            platform_fee_base=breakdown.platform_fee_base,
            platform_customer_service_fee_rate_percent=breakdown.platform_customer_service_fee_rate_percent,
            platform_customer_service_fee_amount=breakdown.platform_customer_service_fee_amount,
            subtotal_before_discounts=breakdown.subtotal_before_discounts,
            subtotal_before_vat=breakdown.subtotal_after_discounts,
            vat_rate_percent=breakdown.vat_rate_percent,
            vat_amount=breakdown.vat_amount,
            platform_fleet_owner_commission_rate_percent=breakdown.platform_fleet_owner_commission_rate_percent,
            platform_fleet_owner_commission_amount=breakdown.platform_fleet_owner_commission_amount,
            fleet_owner_payout_amount_net=breakdown.fleet_owner_payout_amount_net,
            referral_referrer_customer_id=claim.referrer_id,
            referral_discount_amount=breakdown.referral_discount_amount,
            referral_status=REFERRAL_STATUS_APPLIED if is_claimed else REFERRAL_STATUS_NONE,
            referral_credits_used=breakdown.credits_used,
            referral_credits_reserved=breakdown.credits_used,
            legs=[
                BookingLegRecord(
                    leg_date=leg_price.leg_date,
                    leg_start_time=leg.leg_start_time,
                    leg_end_time=leg.leg_end_time,
                    total_daily_price=leg_price.price,
                    items_net_value_for_leg=split.net_per_leg,
                    platform_commission_rate_on_leg=breakdown.platform_fleet_owner_commission_rate_percent,
                    platform_commission_amount_on_leg=split.commission_per_leg,
                    fleet_owner_earning_for_leg=split.earnings_per_leg,
                    booking_id=booking_id,
                )
                for leg, leg_price in zip(legs, breakdown.leg_prices)
            ],
        )
        if isinstance(identity, AuthenticatedCustomer):
            booking.customer_id = identity.customer_id
        else:
            booking.guest_email = identity.email
            booking.guest_name = identity.name
            booking.guest_phone = identity.phone

        await self._booking_repo.create(booking)
        await self._referral_claimer.record_reward(claim, booking.id)
        return booking

    async def _authorize_payment(
        self,
        booking: Booking,
        customer: PaymentCustomer,
        log_ctx: dict,
    ) -> str:
        try:
            authorization = await self._payment_gateway.authorize(
                amount=booking.total_amount,
                customer=customer,
                idempotency_key=booking.id,
                metadata={
                    "booking_id": booking.id,
                    "booking_reference": booking.booking_reference,
                    "booking_type": booking.booking_type.value,
                },
            )
        except Exception as exc:
            self._logger.warning(
                "Payment authorization failed, marking booking payment as failed",
                exc_info=exc,
                extra={**log_ctx, "stage": "payment", "booking_id": booking.id},
            )
            await self._compensate(booking, log_ctx)
            if isinstance(exc, PaymentAuthorizationError):
                exc.booking_id = booking.id
                exc.booking_reference = booking.booking_reference
                raise
            raise PaymentAuthorizationError(
                booking_id=booking.id, booking_reference=booking.booking_reference
            ) from exc

        # El checkout ya existe: una falla aquí no marca el pago como FAILED
        try:
            async with self._transaction_manager.start():
                await self._booking_repo.set_payment_intent(booking.id, authorization.payment_intent_id)
        except Exception as exc:
            self._logger.error(
                "Payment authorized but payment intent could not be saved",
                exc_info=exc,
                extra={
                    **log_ctx,
                    "stage": "payment_intent",
                    "booking_id": booking.id,
                    "payment_intent_id": authorization.payment_intent_id,
                },
            )
            raise PaymentIntentNotRecordedError(
                booking_id=booking.id,
                booking_reference=booking.booking_reference,
                payment_intent_id=authorization.payment_intent_id,
            ) from exc

        self._logger.info(
            "Payment authorized",
            extra={
                **log_ctx,
                "stage": "payment",
                "booking_id": booking.id,
                "payment_intent_id": authorization.payment_intent_id,
            },
        )
        return authorization.checkout_url

    async def _compensate(self, booking: Booking, log_ctx: dict) -> None:
        try:
            async with self._transaction_manager.start():
                await self._booking_repo.update_payment_status(booking.id, PAYMENT_STATUS_FAILED)
        except Exception as exc:
            self._logger.error(
                "Compensation failed, booking payment status not updated",
                exc_info=exc,
                extra={**log_ctx, "stage": "compensation", "booking_id": booking.id},
            )
            return
        booking.payment_status = PAYMENT_STATUS_FAILED

    def _schedule_flight_alert(self, booking: Booking, flight: FlightContext) -> None:
        task = asyncio.create_task(
            self._create_flight_alert(booking.booking_reference, booking.flight_id, flight)
        )
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

    async def _create_flight_alert(
        self,
        booking_reference: str,
        flight_id: str,
        flight: FlightContext,
    ) -> None:
        try:
            alert_id = await self._flight_resolver.request_flight_alert(
                flight_id=flight_id,
                flight_number=flight.flight_number,
                arrival_time=flight.arrival_time,
                destination_iata=flight.destination_iata,
            )
        except Exception as exc:
            self._logger.warning(
                "Flight alert creation failed",
                exc_info=exc,
                extra={"booking_reference": booking_reference, "flight_number": flight.flight_number},
            )
            return
        self._logger.info(
            "Flight alert created",
            extra={
                "booking_reference": booking_reference,
                "flight_number": flight.flight_number,
                "alert_id": alert_id,
            },
        )
