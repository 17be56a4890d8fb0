from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

from ..models.medical_report import ReportType

class DoctorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    speciality: str
    experience: Optional[str] = None
    description: Optional[str] = None
    is_available: bool = True

class MedicalReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_name: str
    email: str
    title: str
    type: ReportType
    date: Optional[datetime] = None
    content: Optional[str] = None

class ChatRequest(BaseModel):
    message: str = ""

class ChatResponse(BaseModel):
    response: str
    intent: str
