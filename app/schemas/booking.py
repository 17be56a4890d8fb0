from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Union

# Booking bodies accept every field as optional so that missing values are
# reported together as field errors instead of a framework 422.

def _scalar_to_str(value):
    # Form libraries often send phone numbers and dates as numbers
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value

class AppointmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date: Optional[str] = None
    time_slot: Optional[str] = Field(None, alias="timeSlot")
    doctor: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_scalars(cls, value):
        return _scalar_to_str(value)

class ConsultationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    patient_name: Optional[str] = Field(None, alias="patientName")
    patient_email: Optional[str] = Field(None, alias="patientEmail")
    patient_phone: Optional[str] = Field(None, alias="patientPhone")
    consultation_type: Optional[str] = Field(None, alias="consultationType")
    preferred_date: Optional[str] = Field(None, alias="preferredDate")
    health_concern: Optional[str] = Field(None, alias="healthConcern")
    medical_history: Optional[str] = Field(None, alias="medicalHistory")
    amount: Optional[Union[int, float, str]] = None

    @field_validator(
        "patient_name", "patient_email", "patient_phone", "consultation_type",
        "preferred_date", "health_concern", "medical_history",
        mode="before",
    )
    @classmethod
    def coerce_scalars(cls, value):
        return _scalar_to_str(value)
