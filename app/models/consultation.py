from sqlalchemy import Column, Integer, String, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base

class ConsultationType(str, enum.Enum):
    INSTANT = "instant"
    SCHEDULED = "scheduled"
    EMERGENCY = "emergency"

class ConsultationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Consultation(Base):
    __tablename__ = "consultations"

    id = Column(Integer, primary_key=True, index=True)
    consultation_id = Column(String(40), unique=True, index=True, nullable=False)

    # Patient contact
    patient_name = Column(String(200), nullable=False)
    patient_email = Column(String(255), nullable=False, index=True)
    patient_phone = Column(String(20), nullable=False)

    # Consultation details
    consultation_type = Column(
        SQLEnum(ConsultationType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    amount = Column(Integer, nullable=False)
    preferred_date = Column(String(20), nullable=True)
    health_concern = Column(Text, nullable=False)
    medical_history = Column(Text, nullable=True)
    status = Column(
        SQLEnum(ConsultationStatus, values_callable=lambda e: [m.value for m in e]),
        default=ConsultationStatus.PENDING,
        nullable=False,
    )

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Consultation(id={self.id}, consultation_id='{self.consultation_id}', type='{self.consultation_type}')>"
