from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, condecimal, constr

from fleet_booking.application.dtos.booking_dto import CreateBookingRequestDTO
from fleet_booking.domain.entities.booking import BookingType

Money = condecimal(max_digits=14, decimal_places=2, ge=0)

# "14:30", "9 AM", "9:30pm"
PICKUP_TIME_PATTERN = r"^(\d{1,2}:\d{2}|\d{1,2}(:\d{2})?\s*([AaPp][Mm]))$"


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vehicle_id: constr(strip_whitespace=True, min_length=1)
    booking_type: BookingType
    start_date: datetime
    end_date: datetime
    pickup_address: constr(strip_whitespace=True, min_length=1)
    drop_off_address: str | None = None
    pickup_time: constr(strip_whitespace=True, pattern=PICKUP_TIME_PATTERN) | None = None
    flight_number: constr(strip_whitespace=True, min_length=3, max_length=10) | None = None
    include_security_detail: bool = False
    requires_full_tank: bool = False
    use_credits: Money | None = None
    special_requests: str | None = Field(default=None, max_length=1000)
    client_total_amount: Money | None = None
    guest_email: EmailStr | None = None
    guest_name: str | None = None
    guest_phone: str | None = None

    def to_dto(self) -> CreateBookingRequestDTO:
        return CreateBookingRequestDTO(
            vehicle_id=self.vehicle_id,
            booking_type=self.booking_type,
            start_date=self.start_date,
            end_date=self.end_date,
            pickup_address=self.pickup_address,
            drop_off_address=self.drop_off_address,
            pickup_time=self.pickup_time,
            flight_number=self.flight_number,
            include_security_detail=self.include_security_detail,
            requires_full_tank=self.requires_full_tank,
            use_credits=self.use_credits,
            special_requests=self.special_requests,
            client_total_amount=self.client_total_amount,
            guest_email=str(self.guest_email) if self.guest_email else None,
            guest_name=self.guest_name,
            guest_phone=self.guest_phone,
        )


class CreateBookingResponse(BaseModel):
    booking_id: str
    booking_reference: str
    checkout_url: str
    total_amount: Decimal


class FieldErrorBody(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    code: str
    message: str
    retryable: bool
    retry_hint: str | None = None
    errors: list[FieldErrorBody] = Field(default_factory=list)
    booking_id: str | None = None
    booking_reference: str | None = None
