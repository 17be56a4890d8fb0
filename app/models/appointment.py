from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from ..core.database import Base

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Patient contact
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=False)

    # Appointment details
    date = Column(String(20), nullable=False, index=True)
    time_slot = Column(String(50), nullable=False)
    doctor = Column(String(200), nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "date": self.date,
            "timeSlot": self.time_slot,
            "doctor": self.doctor,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Appointment(id={self.id}, name='{self.name}', doctor='{self.doctor}', date='{self.date}')>"
