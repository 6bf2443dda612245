# mockhire/routers/interviewers.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import EligibilityUpdate, InterviewerRegistration, InterviewerResponse, ScheduleUpdate
from mockhire.base.security import verify_api_key
from mockhire.services.interviewer_service import InterviewerService

router = APIRouter(tags=["Interviewers"])
interviewers = InterviewerService()


@router.post("", summary="Register as an interviewer", response_model=InterviewerResponse, status_code=201)
def register_interviewer(req: InterviewerRegistration, db: Session = Depends(get_db)):
    return interviewers.register(req, db)


@router.get("/{interviewer_id}", response_model=InterviewerResponse)
def get_interviewer(interviewer_id: str, db: Session = Depends(get_db)):
    return interviewers.get(interviewer_id, db)


@router.put("/{interviewer_id}/schedule", summary="Set weekly availability", response_model=InterviewerResponse,
            dependencies=[Depends(verify_api_key)])
def update_schedule(interviewer_id: str, req: ScheduleUpdate, db: Session = Depends(get_db)):
    return interviewers.update_schedule(interviewer_id, req, db)


@router.put(
    "/{interviewer_id}/eligibility",
    summary="Approve or suspend an interviewer",
    response_model=InterviewerResponse,
    dependencies=[Depends(verify_api_key)],
)
def set_eligibility(interviewer_id: str, req: EligibilityUpdate, db: Session = Depends(get_db)):
    return interviewers.set_eligibility(interviewer_id, req, db)
