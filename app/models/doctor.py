from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from ..core.database import Base

DEFAULT_DOCTORS = [
    {
        "name": "Dr. Aditi Sharma",
        "speciality": "Cardiologist",
        "experience": "15+ years",
        "description": "Expert in treating heart diseases and preventive cardiology.",
    },
    {
        "name": "Dr. Ravi Kumar",
        "speciality": "Dermatologist",
        "experience": "12+ years",
        "description": "Specializes in skin care, acne treatments, and cosmetic dermatology.",
    },
    {
        "name": "Dr. Sneha Iyer",
        "speciality": "Pediatrician",
        "experience": "10+ years",
        "description": "Dedicated to child healthcare and preventive pediatrics.",
    },
]

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)

    # Professional information
    name = Column(String(200), nullable=False, unique=True)
    speciality = Column(String(100), nullable=False)
    experience = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)

    # Availability
    is_available = Column(Boolean, default=True)

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}', speciality='{self.speciality}')>"

def seed_doctors(db: Session) -> int:
    """Insert the default doctor directory if the table is empty."""
    if db.query(Doctor).first():
        return 0

    db.add_all([Doctor(**data) for data in DEFAULT_DOCTORS])
    db.commit()
    return len(DEFAULT_DOCTORS)
