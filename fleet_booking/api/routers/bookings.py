from fastapi import APIRouter, Depends, Header, status

from fleet_booking.api.dependencies import get_create_booking_use_case
from fleet_booking.api.schemas.bookings import (
    CreateBookingRequest,
    CreateBookingResponse,
    ErrorResponse,
)
from fleet_booking.application.use_cases.create_booking import CreateBookingUseCase

router = APIRouter()


@router.post(
    "/bookings",
    response_model=CreateBookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def create_booking(
    payload: CreateBookingRequest,
    customer_id: str | None = Header(default=None, convert_underscores=False, alias="X-Customer-Id"),
    use_case: CreateBookingUseCase = Depends(get_create_booking_use_case),
) -> CreateBookingResponse:
    # La autenticación ocurre aguas arriba; aquí solo llega el id
    result = await use_case.execute(request=payload.to_dto(), customer_id=customer_id or None)
    return CreateBookingResponse(
        booking_id=result.booking_id,
        booking_reference=result.booking_reference,
        checkout_url=result.checkout_url,
        total_amount=result.total_amount,
    )
