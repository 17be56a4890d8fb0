from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List
import logging
import secrets
import time

from ..core.config import Settings, settings as default_settings
from ..core.errors import BookingValidationError, PersistenceError
from ..models.appointment import Appointment
from ..models.consultation import Consultation, ConsultationStatus, ConsultationType
from ..schemas.booking import AppointmentRequest, ConsultationRequest
from .notifications import NotificationOutcome, NotificationService
from .validation import (
    get_consultation_price, normalize_date, normalize_email, normalize_phone,
    validate_appointment, validate_consultation
)

logger = logging.getLogger(__name__)

def confirmation_message(outcome: NotificationOutcome, subject: str) -> str:
    """Human-readable result for each combination of delivered channels."""
    if outcome.email_sent and outcome.sms_sent:
        return f"{subject}! Confirmation sent to your email and phone."
    if outcome.email_sent:
        return f"{subject}! Confirmation sent to your email."
    if outcome.sms_sent:
        return f"{subject}! Confirmation sent to your phone."
    return f"{subject}! Your booking is confirmed."

def generate_consultation_id() -> str:
    return f"CONS-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"

def _clean(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None

class BookingService:
    def __init__(
        self,
        db: Session,
        notifier: NotificationService,
        settings: Settings = default_settings,
    ):
        self.db = db
        self.notifier = notifier
        self.settings = settings

    async def book_appointment(self, request: AppointmentRequest) -> dict:
        """Validate, persist and confirm an appointment."""
        data = request.model_dump(by_alias=True)

        errors = validate_appointment(data)
        if errors:
            logger.info(f"Appointment rejected: {sorted(errors)}")
            raise BookingValidationError(errors)

        appointment = Appointment(
            name=_clean(request.name),
            email=normalize_email(request.email),
            phone=normalize_phone(request.phone),
            date=normalize_date(request.date),
            time_slot=_clean(request.time_slot),
            doctor=_clean(request.doctor),
        )
        self._persist(appointment, "appointment")
        logger.info(f"Appointment {appointment.id} booked with {appointment.doctor} on {appointment.date}")

        outcome = await self.notifier.notify_appointment(appointment)

        return {
            "success": True,
            "message": confirmation_message(outcome, "Appointment booked successfully"),
            "appointment": appointment.to_dict(),
            "notifications": outcome.as_dict(),
        }

    async def book_consultation(self, request: ConsultationRequest) -> dict:
        """Validate, price, persist and confirm a consultation request."""
        prices = self.settings.CONSULTATION_PRICES
        ceiling = self.settings.MAX_CONSULTATION_AMOUNT
        data = request.model_dump(by_alias=True)

        errors = validate_consultation(data, prices, ceiling)
        if errors:
            logger.info(f"Consultation rejected: {sorted(errors)}")
            raise BookingValidationError(errors)

        consultation_type = ConsultationType(request.consultation_type.strip())
        amount = get_consultation_price(consultation_type.value, prices, ceiling)

        consultation = Consultation(
            consultation_id=generate_consultation_id(),
            patient_name=_clean(request.patient_name),
            patient_email=normalize_email(request.patient_email),
            patient_phone=normalize_phone(request.patient_phone),
            consultation_type=consultation_type,
            amount=amount,
            preferred_date=normalize_date(request.preferred_date),
            health_concern=_clean(request.health_concern),
            medical_history=_clean(request.medical_history),
            status=ConsultationStatus.PENDING,
        )
        self._persist(consultation, "consultation")
        logger.info(
            f"Consultation {consultation.consultation_id} booked "
            f"({consultation_type.value}, amount {amount})"
        )

        outcome = await self.notifier.notify_consultation(consultation)

        return {
            "success": True,
            "message": confirmation_message(outcome, "Consultation booked successfully"),
            "consultationId": consultation.consultation_id,
            "type": consultation_type.value,
            "amount": amount,
            "status": consultation.status.value,
            "preferredDate": consultation.preferred_date,
            "notifications": outcome.as_dict(),
        }

    def consultation_config(self) -> dict:
        return {
            "prices": dict(self.settings.CONSULTATION_PRICES),
            "maxAmount": self.settings.MAX_CONSULTATION_AMOUNT,
            "currency": self.settings.CURRENCY,
        }

    def list_appointments(self, email: str) -> List[dict]:
        appointments = (
            self.db.query(Appointment)
            .filter(Appointment.email == normalize_email(email))
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .all()
        )
        return [appointment.to_dict() for appointment in appointments]

    def _persist(self, record, kind: str):
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save {kind}: {str(e)}")
            raise PersistenceError(f"Failed to save {kind}. Please try again later.")
