"""Excepciones de dominio para el flujo de creación de reservas."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, code: str | None = None, retry_hint: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        self.retry_hint = retry_hint
        super().__init__(self.message)

    @property
    def errors(self) -> list[FieldError]:
        return []


# === Errores de Validación ===


class ValidationFailure(DomainError):
    """Datos de entrada inválidos; se puede reintentar tras corregirlos."""

    status_code = 400
    retryable = True

    def __init__(
        self,
        errors: list[FieldError],
        message: str = "One or more validation errors occurred",
        code: str = "VALIDATION_ERROR",
        retry_hint: str | None = None,
    ):
        super().__init__(message=message, code=code, retry_hint=retry_hint)
        self._errors = list(errors)

    @property
    def errors(self) -> list[FieldError]:
        return list(self._errors)


class PriceMismatchError(ValidationFailure):
    """El total declarado por el cliente no coincide con el calculado."""

    def __init__(self, client_total: str, server_total: str):
        super().__init__(
            errors=[FieldError("client_total_amount", "Price mismatch. Please refresh and try again.")],
            message="The quoted price is out of date",
            code="PRICE_MISMATCH",
            retry_hint="Refresh the quote and resubmit the booking with the new total.",
        )
        self.client_total = client_total
        self.server_total = server_total


class FlightAlreadyLandedError(ValidationFailure):
    """El vuelo ya aterrizó; no se puede programar la recogida."""

    def __init__(self, flight_number: str):
        super().__init__(
            errors=[FieldError("flight_number", f"Flight {flight_number} has already landed")],
            message=f"Flight {flight_number} has already landed",
            code="FLIGHT_ALREADY_LANDED",
        )
        self.flight_number = flight_number


# === Recursos ===


class ResourceNotFound(DomainError):
    """El recurso solicitado no existe."""

    status_code = 404


class VehicleNotFoundError(ResourceNotFound):
    def __init__(self, vehicle_id: str):
        super().__init__(
            message=f"Vehicle with ID {vehicle_id} was not found",
            code="VEHICLE_NOT_FOUND",
        )
        self.vehicle_id = vehicle_id


class CustomerNotFoundError(ResourceNotFound):
    def __init__(self, customer_id: str):
        super().__init__(
            message=f"Customer with ID {customer_id} was not found",
            code="CUSTOMER_NOT_FOUND",
        )
        self.customer_id = customer_id


class FlightNotFoundError(ResourceNotFound):
    def __init__(self, flight_number: str, flight_date: str):
        super().__init__(
            message=f"Flight {flight_number} was not found for {flight_date}",
            code="FLIGHT_NOT_FOUND",
        )
        self.flight_number = flight_number
        self.flight_date = flight_date


class ResourceUnavailable(DomainError):
    """El recurso existe pero no se puede reservar."""

    status_code = 409
    retryable = True


class VehicleNotAvailableError(ResourceUnavailable):
    def __init__(self, vehicle_id: str, reason: str | None = None):
        super().__init__(
            message=reason or f"Vehicle {vehicle_id} is not available for the selected dates",
            code="VEHICLE_NOT_AVAILABLE",
            retry_hint="Choose different dates or another vehicle.",
        )
        self.vehicle_id = vehicle_id


# === Referidos ===


class DiscountRaceLost(DomainError):
    """Otra reserva concurrente consumió el descuento de referido."""

    status_code = 409
    retryable = True

    def __init__(self, customer_id: str):
        super().__init__(
            message=(
                "The referral discount is no longer available. It may have been used "
                "in another booking."
            ),
            code="REFERRAL_DISCOUNT_NO_LONGER_AVAILABLE",
            retry_hint="Request a new quote and retry the booking without the referral discount.",
        )
        self.customer_id = customer_id


# === Servicios externos ===


class UpstreamFailure(DomainError):
    """Falla de un servicio externo (pasarela de pago, vuelos)."""

    status_code = 502
    retryable = True


class PaymentAuthorizationError(UpstreamFailure):
    """La autorización del pago falló después de confirmar la reserva."""

    def __init__(
        self,
        detail: str | None = None,
        booking_id: str | None = None,
        booking_reference: str | None = None,
    ):
        super().__init__(
            message=detail or "Failed to create payment intent. Please try again.",
            code="PAYMENT_AUTHORIZATION_FAILED",
            retry_hint="Retry the payment for the same booking; the request is idempotent on the booking id.",
        )
        self.booking_id = booking_id
        self.booking_reference = booking_reference


class FlightLookupError(UpstreamFailure):
    def __init__(self, flight_number: str, detail: str | None = None):
        super().__init__(
            message=detail or f"Could not look up flight {flight_number}",
            code="FLIGHT_LOOKUP_FAILED",
            retry_hint="Retry shortly; the flight status provider did not respond.",
        )
        self.flight_number = flight_number


# === Errores internos ===


class InternalInconsistency(DomainError):
    """Estado imposible alcanzado; siempre es un bug."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message=message, code="INTERNAL_INCONSISTENCY")


class BookingCreationFailedError(DomainError):
    """Error inesperado dentro de la transacción; se revirtió por completo."""

    status_code = 500
    retryable = True

    def __init__(self, detail: str | None = None):
        super().__init__(
            message=detail or "An unexpected error occurred while creating the booking",
            code="BOOKING_CREATION_FAILED",
            retry_hint="Retry the booking; no changes were saved.",
        )


class PaymentIntentNotRecordedError(DomainError):
    """
    El pago se autorizó pero no se pudo guardar su referencia en la reserva.

    La reserva conserva su estado de pago; reintentar el pago con la misma
    reserva devuelve el mismo checkout por la llave de idempotencia.
    """

    status_code = 500
    retryable = True

    def __init__(self, booking_id: str, booking_reference: str, payment_intent_id: str):
        super().__init__(
            message="Payment was authorized but could not be linked to the booking",
            code="PAYMENT_INTENT_NOT_RECORDED",
            retry_hint="Retry the payment for the same booking; the request is idempotent on the booking id.",
        )
        self.booking_id = booking_id
        self.booking_reference = booking_reference
        self.payment_intent_id = payment_intent_id


class RatesUnavailableError(DomainError):
    """No hay una tarifa vigente para algún concepto requerido."""

    status_code = 503

    def __init__(self, missing_rate: str):
        super().__init__(
            message=f"No active {missing_rate} rate found",
            code="RATES_UNAVAILABLE",
        )
        self.missing_rate = missing_rate
