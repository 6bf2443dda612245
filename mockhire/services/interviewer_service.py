# mockhire/services/interviewer_service.py

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from mockhire.base.models import EligibilityUpdate, InterviewerRegistration, InterviewerResponse, ScheduleUpdate
from mockhire.models.tables import InterviewerModel, ProfileModel
from mockhire.services.notification_service import NotificationService
from mockhire.utils.time_slots import WEEKDAYS, parse_clock_range

logger = logging.getLogger("interviewer_service")


class InterviewerService:
    def __init__(self, notifier: Optional[NotificationService] = None):
        self.notifier = notifier or NotificationService()

    def _get(self, interviewer_id: str, db: Session) -> InterviewerModel:
        interviewer = db.query(InterviewerModel).filter_by(id=interviewer_id).first()
        if not interviewer:
            raise HTTPException(status_code=404, detail="Interviewer not found")
        return interviewer

    def register(self, req: InterviewerRegistration, db: Session) -> InterviewerResponse:
        profile = db.query(ProfileModel).filter_by(email=req.email).first()
        if profile and db.query(InterviewerModel).filter_by(user_id=profile.id).first():
            raise HTTPException(status_code=409, detail="Interviewer already registered")

        if not profile:
            profile = ProfileModel(email=req.email, full_name=req.full_name, role="interviewer")
            db.add(profile)
            db.flush()
        else:
            profile.role = "interviewer"
            profile.full_name = profile.full_name or req.full_name

        # New interviewers stay ineligible until approved
        interviewer = InterviewerModel(
            user_id=profile.id,
            experience_years=req.experience_years,
            skills=req.skills,
            technologies=req.technologies,
            company=req.company,
            position=req.position,
            availability_days=[],
            time_slots={},
            is_eligible=False,
        )
        db.add(interviewer)
        db.commit()
        db.refresh(interviewer)

        self.notifier.send_interviewer_welcome(profile.email, profile.full_name)
        logger.info(f"[Register] Interviewer {interviewer.id} for {profile.email}")
        return InterviewerResponse.model_validate(interviewer)

    def get(self, interviewer_id: str, db: Session) -> InterviewerResponse:
        return InterviewerResponse.model_validate(self._get(interviewer_id, db))

    def update_schedule(self, interviewer_id: str, req: ScheduleUpdate, db: Session) -> InterviewerResponse:
        days = [d.capitalize() for d in req.availability_days]
        unknown = [d for d in days if d not in WEEKDAYS]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown weekday(s): {', '.join(unknown)}")

        time_slots = {}
        for day, ranges in req.time_slots.items():
            day = day.capitalize()
            if day not in days:
                raise HTTPException(status_code=400, detail=f"Time slots given for unavailable day {day}")
            for value in ranges:
                if parse_clock_range(value) is None:
                    raise HTTPException(status_code=400, detail=f"Invalid time range: {value}")
            time_slots[day] = list(ranges)

        interviewer = self._get(interviewer_id, db)
        interviewer.availability_days = days
        interviewer.time_slots = time_slots
        db.commit()
        db.refresh(interviewer)

        logger.info(f"[Schedule] Interviewer {interviewer_id} available on {days}")
        return InterviewerResponse.model_validate(interviewer)

    def set_eligibility(self, interviewer_id: str, req: EligibilityUpdate, db: Session) -> InterviewerResponse:
        interviewer = self._get(interviewer_id, db)
        interviewer.is_eligible = req.is_eligible
        db.commit()
        db.refresh(interviewer)
        logger.info(f"[Eligibility] Interviewer {interviewer_id} eligible={req.is_eligible}")
        return InterviewerResponse.model_validate(interviewer)
