from sqlalchemy import Column, Integer, String, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base

class ReportType(str, enum.Enum):
    LAB = "lab"
    XRAY = "xray"
    PRESCRIPTION = "prescription"
    CONSULTATION = "consultation"
    SURGERY = "surgery"
    GENERAL = "general"

class MedicalReport(Base):
    __tablename__ = "medical_reports"

    id = Column(Integer, primary_key=True, index=True)

    patient_name = Column(String(200), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    type = Column(
        SQLEnum(ReportType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ReportType.GENERAL,
    )
    date = Column(DateTime, server_default=func.now(), index=True)
    content = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<MedicalReport(id={self.id}, title='{self.title}', type='{self.type}')>"
