from fastapi import APIRouter, Depends, status
from typing import Optional

from ...api.deps import get_booking_service, require_session
from ...services.booking_service import BookingService
from ...schemas.auth import SessionUser
from ...schemas.booking import AppointmentRequest, ConsultationRequest

router = APIRouter(prefix="/api", tags=["Booking"])

@router.post("/book-appointment", status_code=status.HTTP_201_CREATED)
async def book_appointment(
    request: Optional[AppointmentRequest] = None,
    booking: BookingService = Depends(get_booking_service)
):
    """Book an appointment and send confirmations."""
    return await booking.book_appointment(request or AppointmentRequest())

@router.post("/book-consultation", status_code=status.HTTP_201_CREATED)
async def book_consultation(
    request: Optional[ConsultationRequest] = None,
    booking: BookingService = Depends(get_booking_service)
):
    """Book an online consultation at the configured price for its type."""
    return await booking.book_consultation(request or ConsultationRequest())

@router.get("/consultation-config")
async def consultation_config(
    booking: BookingService = Depends(get_booking_service)
):
    """Consultation price table and the maximum allowed amount."""
    return booking.consultation_config()

@router.get("/appointments")
async def my_appointments(
    current: SessionUser = Depends(require_session),
    booking: BookingService = Depends(get_booking_service)
):
    """Appointments booked under the logged-in user's email."""
    return {"appointments": booking.list_appointments(current.email)}
