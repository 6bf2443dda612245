"""
MockHire Services Module

This module provides centralized access to the booking services.
Each service owns one step of the candidate journey: pricing a plan,
matching an interviewer, holding the slot, taking payment and booking the interview.
"""

# === Catalogue & Pricing ===
from .pricing_service import PricingService
from .add_on_service import AddOnService

# === Matching & Availability ===
from .interviewer_service import InterviewerService
from .interviewer_matcher_service import InterviewerMatcherService
from .reservation_service import ReservationNotFound, ReservationService

# === Payments ===
from .payment_service import PaymentService
from .webhook_service import PaymentWebhookService

# === Interviews & Notifications ===
from .notification_service import NotificationService
from .scheduling_service import InterviewSchedulingService
from .booking_service import BookingService

# === Resume Reviews ===
from .resume_review_service import ResumeReviewService

# === Exported Interface ===
__all__ = [
    "PricingService",
    "AddOnService",
    "InterviewerService",
    "InterviewerMatcherService",
    "ReservationNotFound",
    "ReservationService",
    "PaymentService",
    "PaymentWebhookService",
    "NotificationService",
    "InterviewSchedulingService",
    "BookingService",
    "ResumeReviewService",
]
