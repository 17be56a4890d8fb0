from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import require_session
from ...models.doctor import Doctor
from ...models.medical_report import MedicalReport
from ...schemas.auth import SessionUser
from ...schemas.reports import DoctorResponse, MedicalReportResponse

router = APIRouter(prefix="/api", tags=["Records"])

@router.get("/doctors", response_model=List[DoctorResponse])
async def list_doctors(db: Session = Depends(get_db)):
    """List doctors currently accepting appointments."""
    return db.query(Doctor).filter(Doctor.is_available == True).order_by(Doctor.name).all()

@router.get("/medical-reports", response_model=List[MedicalReportResponse])
async def list_medical_reports(
    current: SessionUser = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Medical reports belonging to the logged-in user."""
    return (
        db.query(MedicalReport)
        .filter(MedicalReport.email == current.email.lower())
        .order_by(MedicalReport.date.desc(), MedicalReport.id.desc())
        .all()
    )

@router.get("/medical-reports/{report_id}", response_model=MedicalReportResponse)
async def get_medical_report(
    report_id: int,
    current: SessionUser = Depends(require_session),
    db: Session = Depends(get_db)
):
    """A single report, only if it belongs to the caller."""
    report = db.query(MedicalReport).filter(
        MedicalReport.id == report_id,
        MedicalReport.email == current.email.lower()
    ).first()

    if not report:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Report not found"
        )
    return report
