from datetime import date, datetime, time
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


# === 💸 Pricing & Coupons ===

class DiscountRequest(BaseModel):
    original_price: float = Field(..., ge=0, description="Price before discount")
    discount_type: Literal["percentage", "fixed"]
    discount_value: float = Field(..., ge=0)


class DiscountCalculation(BaseModel):
    original_price: float
    discount_amount: int
    final_price: int
    discount_type: str
    discount_value: float


class CouponValidationRequest(BaseModel):
    code: str = Field(..., min_length=1, description="Coupon code, case-insensitive")
    plan_type: str = Field(..., description="essential, professional or executive")


class CouponValidationResult(BaseModel):
    is_valid: bool
    discount_type: str = ""
    discount_value: float = 0
    message: str


class CouponRedeemRequest(BaseModel):
    code: str = Field(..., min_length=1)


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    discount_type: str
    discount_value: float
    expiring_on: date
    plan_type: str
    usage_limit: Optional[int] = None
    usage_count: int = 0
    display_text: Optional[str] = None


class PlanResponse(BaseModel):
    id: str
    name: str
    price: int
    duration: int = Field(..., description="Session length in minutes")
    description: str


class AddOnSelection(BaseModel):
    addon_key: str
    quantity: int = 1


class PriceQuoteRequest(BaseModel):
    plan_id: str
    coupon_code: Optional[str] = None
    selected_add_ons: List[AddOnSelection] = Field(default_factory=list)


class PriceQuote(BaseModel):
    plan_id: str
    plan_price: int
    discount_amount: int = 0
    coupon_message: Optional[str] = None
    add_ons_total: float = 0
    amount_payable: float


# === ➕ Add-ons ===

class ValidatedAddOn(BaseModel):
    addon_key: str
    quantity: int
    price: float
    total: float


class AddOnValidationRequest(BaseModel):
    plan_type: str
    selected_add_ons: List[AddOnSelection] = Field(default_factory=list)


class AddOnValidationResult(BaseModel):
    is_valid: bool
    error_message: Optional[str] = None
    validated_add_ons: List[ValidatedAddOn] = Field(default_factory=list)
    total_price: float = 0


class AddOnResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    addon_key: str
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    category: str
    requires_plan: Optional[str] = None
    max_quantity: int


# === 🤝 Interviewer Matching ===

class MatchRequest(BaseModel):
    experience_years: float = Field(
        0, ge=0, validation_alias=AliasChoices("experience_years", "experienceYears")
    )
    skill_categories: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("skill_categories", "skillCategories")
    )
    specific_skills: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("specific_skills", "specificSkills")
    )
    time_slot: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("time_slot", "timeSlot"),
        description='Requested slot, e.g. "Monday, 16/08/2025 10:00-11:00"',
    )
    target_role: Optional[str] = None
    company: Optional[str] = None
    current_position: Optional[str] = None
    resume_url: Optional[str] = None


class ScoreBreakdown(BaseModel):
    experience: int = 0
    skills: int = 0
    time: int = 0


class MatchResult(BaseModel):
    interviewer_id: str
    user_id: str
    score: int = Field(..., ge=0, le=100)
    time_match: bool
    alternative_time_slots: List[str] = Field(default_factory=list)
    interviewer_name: str
    interviewer_email: str
    company: Optional[str] = None
    position: Optional[str] = None
    experience_years: Optional[int] = None
    skills: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    breakdown: ScoreBreakdown


class AvailableSlotsResponse(BaseModel):
    interviewer_id: str
    slots: List[str]


class PreviewedInterviewer(BaseModel):
    id: str
    name: str
    email: str
    company: Optional[str] = None
    position: Optional[str] = None
    experience_years: Optional[int] = None
    skills: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)


class PreviewedInterviewerResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
    interviewer: Optional[PreviewedInterviewer] = None
    time_available: bool = False
    alternative_time_slots: List[str] = Field(default_factory=list)


# === 🧑‍🏫 Interviewers ===

class InterviewerRegistration(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    experience_years: int = Field(..., ge=0, le=60)
    skills: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    company: Optional[str] = None
    position: Optional[str] = None


class ScheduleUpdate(BaseModel):
    availability_days: List[str]
    time_slots: Dict[str, List[str]] = Field(
        default_factory=dict, description='Per-day ranges, e.g. {"Monday": ["10:00-11:00"]}'
    )


class EligibilityUpdate(BaseModel):
    is_eligible: bool


class InterviewerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    experience_years: Optional[int] = None
    skills: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    availability_days: List[str] = Field(default_factory=list)
    time_slots: Dict[str, List[str]] = Field(default_factory=dict)
    is_eligible: bool
    company: Optional[str] = None
    position: Optional[str] = None


# === 🔒 Reservations ===

class ReservationRequest(BaseModel):
    interviewer_id: str
    time_slot: str = Field(..., description='"Tuesday, 02/09/2025 17:30-18:00"')
    duration_minutes: int = Field(default=30, ge=15, le=180)


class ReservationResponse(BaseModel):
    reservation_id: str
    interviewer_id: str
    time_slot: str
    expires_at: datetime


class PromoteRequest(BaseModel):
    interview_id: str


class ManualBlockRequest(BaseModel):
    interviewer_id: str
    blocked_date: date
    start_time: time
    end_time: time


class TimeBlockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    interviewer_id: str
    blocked_date: date
    start_time: time
    end_time: time
    is_temporary: bool
    expires_at: Optional[datetime] = None
    block_reason: str
    interview_id: Optional[str] = None


class CleanupResponse(BaseModel):
    removed: int


# === 💳 Payments ===

class PaymentSessionCreate(BaseModel):
    amount: float = Field(..., gt=0)
    currency: str = "INR"
    candidate_data: Dict[str, Any] = Field(default_factory=dict)
    matched_interviewer: Optional[Dict[str, Any]] = None
    reservation_id: Optional[str] = None
    selected_plan: Optional[str] = None
    coupon_code: Optional[str] = None
    selected_add_ons: List[AddOnSelection] = Field(default_factory=list)


class PaymentSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount: float
    currency: str
    payment_status: str
    provider_order_id: Optional[str] = None
    provider_payment_id: Optional[str] = None
    selected_plan: Optional[str] = None
    add_ons_total: float = 0
    interview_matched: bool = False
    interview_id: Optional[str] = None
    created_at: Optional[datetime] = None


class CheckoutRequest(BaseModel):
    # Required fields are checked by the service so a missing one answers 400
    amount: Optional[float] = None
    currency: str = "INR"
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    order_id: Optional[str] = None
    return_url: Optional[str] = None
    notify_url: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    selected_plan: Optional[str] = None
    plan_details: Optional[Dict[str, Any]] = None
    payment_session_id: Optional[str] = Field(None, description="Local payment session this order pays for")


class CheckoutResponse(BaseModel):
    payment_session_id: str = Field(..., description="Provider checkout session id")
    order_id: str
    order_status: Optional[str] = None


class WebhookAck(BaseModel):
    status: str
    message: str
    order_id: Optional[str] = None


# === 📅 Interviews & Booking ===

class AutoBookRequest(BaseModel):
    payment_session_id: str
    user_id: str


class ScheduleInterviewRequest(BaseModel):
    interviewer_id: str
    candidate_id: Optional[str] = None
    candidate_name: Optional[str] = None
    candidate_email: EmailStr
    interviewer_email: Optional[str] = None
    interviewer_name: Optional[str] = None
    target_role: Optional[str] = "Not specified"
    experience: Optional[str] = "Not specified"
    time_slot: str
    duration_minutes: Optional[int] = Field(None, ge=15, le=180)
    resume_url: Optional[str] = None
    selected_plan: Optional[str] = None
    plan_details: Optional[Dict[str, Any]] = None


class InterviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    interviewer_id: str
    candidate_email: str
    candidate_name: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    target_role: Optional[str] = None
    scheduled_time: datetime
    status: str
    meeting_link: Optional[str] = None
    selected_plan: Optional[str] = None
    interview_duration: Optional[int] = None
    email_confirmation_sent: bool = False
    rescheduled_from_id: Optional[str] = None


class AutoBookResponse(BaseModel):
    success: bool
    message: str
    interview_matched: bool = False
    interview: Optional[InterviewResponse] = None
    interviewer: Optional[Dict[str, Any]] = None


class RescheduleRequest(BaseModel):
    time_slot: str


# === 📄 Resume Reviews ===

class ResumeReviewCreate(BaseModel):
    user_email: EmailStr
    user_name: Optional[str] = None
    resume_url: str = Field(..., min_length=1)
    target_role: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0, le=60)


class ResumeReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_email: str
    user_name: Optional[str] = None
    target_role: Optional[str] = None
    resume_url: str
    status: str
    report_url: Optional[str] = None
    payment_status: str
    submitted_at: Optional[datetime] = None


class ReviewPaymentResponse(BaseModel):
    review_id: str
    payment_session_id: str
    order_id: str
    order_status: Optional[str] = None
    amount: float


class ReviewCompleteRequest(BaseModel):
    report_url: str = Field(..., min_length=1)
