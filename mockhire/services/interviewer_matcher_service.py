# mockhire/services/interviewer_matcher_service.py

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from mockhire.base.config import settings
from mockhire.base.metrics import match_requests, match_score
from mockhire.base.models import (
    AvailableSlotsResponse,
    MatchRequest,
    MatchResult,
    PreviewedInterviewer,
    PreviewedInterviewerResponse,
    ScoreBreakdown,
)
from mockhire.models.tables import InterviewerModel, InterviewerTimeBlockModel, ProfileModel, utc_now
from mockhire.services.reservation_service import ReservationService, live_blocks_filter
from mockhire.utils.time_slots import (
    DEFAULT_AVAILABILITY_DAYS,
    WEEKDAYS,
    TimeSlot,
    format_time_slot,
    parse_time_slot,
)

logger = logging.getLogger("interviewer_matcher_service")

CANDIDATE_HOURS = ((10, 11), (11, 12), (14, 15), (15, 16))
LOOKAHEAD_DAYS = 7
MAX_ALTERNATIVES = 3
WORKING_HOURS = range(9, 18)


def experience_score(candidate_years: float, interviewer_years: Optional[int]) -> int:
    if interviewer_years is None:
        return 0
    diff = abs(interviewer_years - candidate_years)
    if diff <= 1:
        return 30
    if diff <= 2:
        return 20
    if diff <= 3:
        return 10
    return 0


def skills_score(candidate_skills: List[str], interviewer_skills: List[str]) -> int:
    """Share of candidate skills covered by the interviewer, scaled to 40."""
    wanted = [s.lower() for s in candidate_skills if s]
    offered = [s.lower() for s in interviewer_skills if s]
    if not wanted or not offered:
        return 0

    matched = sum(1 for w in wanted if any(o in w or w in o for o in offered))
    return int(matched / len(wanted) * 40 + 0.5)


def slot_is_free(slot: TimeSlot, blocks: Iterable[InterviewerTimeBlockModel]) -> bool:
    return not any(
        slot.overlaps(TimeSlot(date=b.blocked_date, start_time=b.start_time, end_time=b.end_time))
        for b in blocks
    )


class InterviewerMatcherService:
    """
    Scores every eligible interviewer against the candidate's experience, skills
    and requested time, and returns the single best one.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        reservations: Optional[ReservationService] = None,
    ):
        self.clock = clock or utc_now
        self.reservations = reservations or ReservationService(clock=self.clock)

    def _live_blocks(self, interviewer_id: str, dates: List[date], db: Session) -> List[InterviewerTimeBlockModel]:
        return (
            db.query(InterviewerTimeBlockModel)
            .filter(
                InterviewerTimeBlockModel.interviewer_id == interviewer_id,
                InterviewerTimeBlockModel.blocked_date.in_(dates),
                live_blocks_filter(self.clock()),
            )
            .all()
        )

    def generate_alternative_slots(self, interviewer: InterviewerModel, db: Session) -> List[str]:
        """First free standard slots in the week after today, on the interviewer's days."""
        days = interviewer.availability_days or list(DEFAULT_AVAILABILITY_DAYS)
        today = self.clock().date()
        dates = [today + timedelta(days=offset) for offset in range(1, LOOKAHEAD_DAYS + 1)]
        dates = [d for d in dates if WEEKDAYS[d.weekday()] in days]
        if not dates:
            return []

        blocks = self._live_blocks(interviewer.id, dates, db)
        alternatives: List[str] = []
        for day in dates:
            for start_hour, end_hour in CANDIDATE_HOURS:
                slot = TimeSlot(date=day, start_time=time(start_hour), end_time=time(end_hour))
                if slot_is_free(slot, blocks):
                    alternatives.append(format_time_slot(slot))
                    if len(alternatives) == MAX_ALTERNATIVES:
                        return alternatives
        return alternatives

    def time_score(self, interviewer: InterviewerModel, slot: Optional[TimeSlot], db: Session):
        """Returns (points, time_match, alternatives)."""
        if slot is not None:
            on_day = slot.weekday in (interviewer.availability_days or [])
            in_hours = slot.start_time.hour in WORKING_HOURS
            if on_day and in_hours and slot_is_free(slot, self._live_blocks(interviewer.id, [slot.date], db)):
                return 30, True, []

        alternatives = self.generate_alternative_slots(interviewer, db)
        return (15 if alternatives else 0), False, alternatives

    def find_best_interviewer(self, req: MatchRequest, db: Session) -> MatchResult:
        interviewers = (
            db.query(InterviewerModel)
            .filter(InterviewerModel.is_eligible.is_(True))
            .order_by(InterviewerModel.created_at.asc(), InterviewerModel.id.asc())
            .all()
        )
        if not interviewers:
            match_requests.labels(outcome="no_eligible").inc()
            raise HTTPException(status_code=404, detail="No eligible interviewers found")

        requested_slot = parse_time_slot(req.time_slot) if req.time_slot else None
        if req.time_slot and requested_slot is None:
            logger.warning(f"[Match] Could not parse requested slot {req.time_slot!r}")

        candidate_skills = list(req.skill_categories) + list(req.specific_skills)

        best = None
        best_score = -1
        for interviewer in interviewers:
            exp_points = experience_score(req.experience_years, interviewer.experience_years)
            skill_points = skills_score(
                candidate_skills, list(interviewer.skills or []) + list(interviewer.technologies or [])
            )
            time_points, time_match, alternatives = self.time_score(interviewer, requested_slot, db)
            total = exp_points + skill_points + time_points

            logger.debug(
                f"[Match] {interviewer.id}: exp={exp_points} skills={skill_points} time={time_points} total={total}"
            )
            if total > best_score:
                best_score = total
                best = (interviewer, ScoreBreakdown(experience=exp_points, skills=skill_points, time=time_points),
                        time_match, alternatives)

        if best_score < settings.MIN_MATCH_SCORE:
            match_requests.labels(outcome="no_suitable").inc()
            logger.info(f"[Match] Best score {best_score} below threshold")
            raise HTTPException(status_code=404, detail="No suitable interviewer found")

        interviewer, breakdown, time_match, alternatives = best
        profile = db.query(ProfileModel).filter_by(id=interviewer.user_id).first()

        match_requests.labels(outcome="matched").inc()
        match_score.observe(best_score)
        logger.info(f"[Match] Selected interviewer {interviewer.id} score={best_score} time_match={time_match}")

        return MatchResult(
            interviewer_id=interviewer.id,
            user_id=interviewer.user_id,
            score=best_score,
            time_match=time_match,
            alternative_time_slots=alternatives,
            interviewer_name=(profile.full_name if profile and profile.full_name else None)
            or interviewer.company
            or "Professional Interviewer",
            interviewer_email=profile.email if profile else "",
            company=interviewer.company,
            position=interviewer.position,
            experience_years=interviewer.experience_years,
            skills=interviewer.skills or [],
            technologies=interviewer.technologies or [],
            breakdown=breakdown,
        )

    def get_available_slots(self, interviewer_id: str, db: Session) -> AvailableSlotsResponse:
        interviewer = db.query(InterviewerModel).filter_by(id=interviewer_id, is_eligible=True).first()
        if not interviewer:
            raise HTTPException(status_code=404, detail="Interviewer not found")
        return AvailableSlotsResponse(
            interviewer_id=interviewer_id,
            slots=self.generate_alternative_slots(interviewer, db),
        )

    def check_previewed_interviewer(
        self, interviewer_id: str, preferred_time_slot: Optional[str], db: Session
    ) -> PreviewedInterviewerResponse:
        """
        Re-check the interviewer shown to the candidate before checkout.

        An interviewer who was suspended or removed meanwhile is reported as
        unavailable. Otherwise the preferred slot (if any) is checked against
        live blocks, and alternatives are offered only when it is taken or
        cannot be read.
        """
        interviewer = db.query(InterviewerModel).filter_by(id=interviewer_id, is_eligible=True).first()
        if not interviewer:
            logger.info(f"[Preview] Interviewer {interviewer_id} no longer available")
            return PreviewedInterviewerResponse(available=False, reason="Interviewer no longer available")

        profile = db.query(ProfileModel).filter_by(id=interviewer.user_id).first()
        if not profile:
            logger.warning(f"[Preview] Profile missing for interviewer {interviewer_id}")
            return PreviewedInterviewerResponse(available=False, reason="Interviewer profile not found")

        time_available = True
        alternatives: List[str] = []
        if preferred_time_slot:
            slot = parse_time_slot(preferred_time_slot)
            if slot is None:
                logger.info(f"[Preview] Unreadable preferred slot {preferred_time_slot!r}")
                time_available = False
            else:
                time_available = self.reservations.is_time_slot_available(interviewer.id, slot, db)
            if not time_available:
                alternatives = self.generate_alternative_slots(interviewer, db)

        logger.info(f"[Preview] {interviewer_id} available, time_available={time_available}")
        return PreviewedInterviewerResponse(
            available=True,
            interviewer=PreviewedInterviewer(
                id=interviewer.id,
                name=profile.full_name or interviewer.company or "Professional Interviewer",
                email=profile.email or "",
                company=interviewer.company,
                position=interviewer.position,
                experience_years=interviewer.experience_years,
                skills=interviewer.skills or [],
                technologies=interviewer.technologies or [],
            ),
            time_available=time_available,
            alternative_time_slots=alternatives,
        )
