# mockhire/models/tables.py

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
)

from mockhire.base.database import Base


def utc_now() -> datetime:
    # Naive UTC; every timestamp column in this schema is naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class BlockReason(str, Enum):
    TEMPORARY_RESERVATION = "temporary_reservation"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    MANUAL = "manual"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProfileModel(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(200), nullable=True)
    role = Column(String(20), default="candidate")  # candidate, interviewer, admin
    created_at = Column(DateTime, default=utc_now)


class InterviewerModel(Base):
    __tablename__ = "interviewers"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    experience_years = Column(Integer, nullable=True)
    skills = Column(JSON, default=list)
    technologies = Column(JSON, default=list)
    availability_days = Column(JSON, default=list)  # ["Monday", "Tuesday", ...]
    time_slots = Column(JSON, default=dict)  # {"Monday": ["10:00-11:00"], ...}
    is_eligible = Column(Boolean, default=False, index=True)
    company = Column(String(200), nullable=True)
    position = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=utc_now)


class InterviewerTimeBlockModel(Base):
    __tablename__ = "interviewer_time_blocks"

    id = Column(String, primary_key=True, default=new_id)
    interviewer_id = Column(String, ForeignKey("interviewers.id"), nullable=False, index=True)
    blocked_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_temporary = Column(Boolean, default=False)
    expires_at = Column(DateTime, nullable=True)
    block_reason = Column(String(40), default=BlockReason.MANUAL.value)
    interview_id = Column(String, nullable=True)
    reserved_by_user_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class PaymentSessionModel(Base):
    __tablename__ = "payment_sessions"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, nullable=False, index=True)
    candidate_data = Column(JSON, default=dict)
    amount = Column(Float, nullable=False)
    currency = Column(String(8), default="INR")
    payment_status = Column(String(20), default=PaymentStatus.PENDING.value, index=True)
    provider_order_id = Column(String, nullable=True, unique=True, index=True)
    provider_payment_id = Column(String, nullable=True)
    matched_interviewer = Column(JSON, nullable=True)
    reservation_id = Column(String, nullable=True)
    selected_plan = Column(String(40), nullable=True)
    coupon_code = Column(String(60), nullable=True)
    selected_add_ons = Column(JSON, default=list)
    add_ons_total = Column(Float, default=0)
    interview_matched = Column(Boolean, default=False)
    interview_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class InterviewModel(Base):
    __tablename__ = "interviews"

    id = Column(String, primary_key=True, default=new_id)
    interviewer_id = Column(String, ForeignKey("interviewers.id"), nullable=False, index=True)
    candidate_id = Column(String, nullable=False)
    candidate_name = Column(String(200), nullable=True)
    candidate_email = Column(String(255), nullable=False, index=True)
    interviewer_email = Column(String(255), nullable=True)
    interviewer_name = Column(String(200), nullable=True)
    target_role = Column(String(200), nullable=True)
    experience = Column(String(40), nullable=True)
    scheduled_time = Column(DateTime, nullable=False)
    status = Column(String(20), default=InterviewStatus.SCHEDULED.value, index=True)
    resume_url = Column(String, nullable=True)
    meeting_link = Column(String, nullable=True)
    calendar_event_id = Column(String, nullable=True)
    email_confirmation_sent = Column(Boolean, default=False)
    selected_plan = Column(String(40), nullable=True)
    interview_duration = Column(Integer, nullable=True)
    plan_details = Column(JSON, nullable=True)
    selected_add_ons = Column(JSON, default=list)
    add_ons_total = Column(Float, default=0)
    payment_session_id = Column(String, nullable=True)
    rescheduled_from_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(String, primary_key=True, default=new_id)
    code = Column(String(60), nullable=False, unique=True, index=True)
    discount_type = Column(String(20), nullable=False)  # percentage, fixed
    discount_value = Column(Float, nullable=False)
    status = Column(String(20), default="active")  # active, stopped
    expiring_on = Column(Date, nullable=False)
    plan_type = Column(String(40), default="all")
    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, default=0)
    visible = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utc_now)


class AddOnModel(Base):
    __tablename__ = "add_ons"

    id = Column(String, primary_key=True, default=new_id)
    addon_key = Column(String(60), nullable=False, unique=True, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    currency = Column(String(8), default="INR")
    category = Column(String(20), default="service")  # enhancement, service, premium
    is_active = Column(Boolean, default=True)
    requires_plan = Column(String(40), nullable=True)
    max_quantity = Column(Integer, default=1)
    created_at = Column(DateTime, default=utc_now)


class ResumeReviewModel(Base):
    __tablename__ = "resume_reviews"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, nullable=True, index=True)
    user_email = Column(String(255), nullable=False)
    user_name = Column(String(200), nullable=True)
    target_role = Column(String(200), nullable=True)
    experience_years = Column(Integer, nullable=True)
    resume_url = Column(String, nullable=False)
    status = Column(String(20), default=ReviewStatus.PENDING.value)
    report_url = Column(String, nullable=True)
    payment_status = Column(String(20), default="pending")
    payment_reference = Column(String, nullable=True)
    payment_amount = Column(Float, nullable=True)
    payment_verified_at = Column(DateTime, nullable=True)
    report_generated_at = Column(DateTime, nullable=True)
    email_sent_at = Column(DateTime, nullable=True)
    submitted_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class ResumeReviewPaymentModel(Base):
    __tablename__ = "resume_review_payments"

    id = Column(String, primary_key=True, default=new_id)
    resume_review_id = Column(String, ForeignKey("resume_reviews.id"), nullable=False, index=True)
    provider_order_id = Column(String, nullable=False, unique=True, index=True)
    provider_payment_id = Column(String, nullable=True)
    amount = Column(Float, nullable=False)
    status = Column(String(20), default="created")  # created, paid, failed
    raw_payload = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utc_now)
