# mockhire/services/pricing_service.py

import logging
import math
from datetime import date
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from mockhire.base.config import settings
from mockhire.base.models import (
    AddOnSelection,
    CouponResponse,
    CouponValidationResult,
    DiscountCalculation,
    PlanResponse,
    PriceQuote,
)
from mockhire.models.tables import CouponModel

logger = logging.getLogger("pricing_service")

DEFAULT_PLAN_PRICE = 999
DEFAULT_PLAN_DURATION = 60


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_discount(original_price: float, discount_type: str, discount_value: float) -> DiscountCalculation:
    """
    Percentage discounts take ``value`` percent of the price, fixed discounts take
    ``value`` itself, anything else is no discount. The discount never exceeds the
    price, it is rounded half-up to whole rupees and the final price is the
    rounded price minus that discount.
    """
    if discount_type == "percentage":
        discount = original_price * discount_value / 100
    elif discount_type == "fixed":
        discount = discount_value
    else:
        discount = 0

    discount_amount = round_half_up(min(max(discount, 0), original_price))
    # discount_amount + final_price == rounded price
    final_price = max(round_half_up(original_price) - discount_amount, 0)

    return DiscountCalculation(
        original_price=original_price,
        discount_amount=discount_amount,
        final_price=final_price,
        discount_type=discount_type,
        discount_value=discount_value,
    )


def format_discount_text(coupon) -> str:
    if coupon.discount_type == "percentage":
        return f"{coupon.discount_value:g}% OFF"
    return f"₹{coupon.discount_value:g} OFF"


def is_coupon_applicable_for_plan(coupon, plan_type: str) -> bool:
    return coupon.plan_type == "all" or coupon.plan_type == plan_type


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class PricingService:
    """Plan catalogue, coupon validation/redemption and price quotes."""

    def __init__(self, add_on_service=None):
        self.add_on_service = add_on_service

    # === Plans ===

    def get_plans(self) -> List[PlanResponse]:
        return [
            PlanResponse(
                id="essential",
                name="Essential",
                price=settings.ESSENTIAL_PLAN_PRICE,
                duration=30,
                description="30-minute mock interview with written feedback",
            ),
            PlanResponse(
                id="professional",
                name="Professional",
                price=settings.PROFESSIONAL_PLAN_PRICE,
                duration=60,
                description="Full-length mock interview with detailed feedback",
            ),
            PlanResponse(
                id="executive",
                name="Executive",
                price=settings.EXECUTIVE_PLAN_PRICE,
                duration=60,
                description="Senior-interviewer session with leadership assessment",
            ),
        ]

    def get_plan(self, plan_id: Optional[str]) -> Optional[PlanResponse]:
        return next((p for p in self.get_plans() if p.id == plan_id), None)

    def get_plan_price(self, plan_id: Optional[str]) -> int:
        plan = self.get_plan(plan_id)
        return plan.price if plan else DEFAULT_PLAN_PRICE

    def get_plan_duration(self, plan_id: Optional[str]) -> int:
        plan = self.get_plan(plan_id)
        return plan.duration if plan else DEFAULT_PLAN_DURATION

    # === Coupons ===

    def list_active_coupons(self, db: Session) -> List[CouponResponse]:
        coupons = (
            db.query(CouponModel)
            .filter(
                CouponModel.status == "active",
                CouponModel.visible.is_(True),
                CouponModel.expiring_on >= date.today(),
                or_(CouponModel.usage_limit.is_(None), CouponModel.usage_count < CouponModel.usage_limit),
            )
            .order_by(CouponModel.created_at.desc())
            .all()
        )
        logger.info(f"[Coupons] {len(coupons)} active coupons")
        return [
            CouponResponse.model_validate(c).model_copy(update={"display_text": format_discount_text(c)})
            for c in coupons
        ]

    def validate_coupon(self, code: str, plan_type: str, db: Session) -> CouponValidationResult:
        normalized = normalize_code(code)
        coupon = db.query(CouponModel).filter(CouponModel.code == normalized).first()

        if not coupon:
            return CouponValidationResult(is_valid=False, message="Invalid coupon code")
        if coupon.status != "active":
            return CouponValidationResult(is_valid=False, message="This coupon is no longer active")
        if coupon.expiring_on < date.today():
            return CouponValidationResult(is_valid=False, message="This coupon has expired")
        if coupon.usage_limit is not None and (coupon.usage_count or 0) >= coupon.usage_limit:
            return CouponValidationResult(is_valid=False, message="This coupon has reached its usage limit")
        if not is_coupon_applicable_for_plan(coupon, plan_type):
            return CouponValidationResult(
                is_valid=False, message=f"This coupon is only valid for the {coupon.plan_type} plan"
            )

        logger.info(f"[Coupons] {normalized} valid for plan {plan_type}")
        return CouponValidationResult(
            is_valid=True,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            message=f"Coupon applied: {format_discount_text(coupon)}",
        )

    def redeem_coupon(self, code: str, db: Session) -> Dict[str, object]:
        normalized = normalize_code(code)
        result = db.execute(
            update(CouponModel)
            .where(
                CouponModel.code == normalized,
                CouponModel.status == "active",
                CouponModel.expiring_on >= date.today(),
                or_(CouponModel.usage_limit.is_(None), CouponModel.usage_count < CouponModel.usage_limit),
            )
            .values(usage_count=CouponModel.usage_count + 1)
        )
        db.commit()

        if result.rowcount == 0:
            logger.warning(f"[Coupons] Redeem rejected for {normalized}")
            raise HTTPException(status_code=409, detail="Coupon cannot be redeemed")

        usage_count = db.query(CouponModel.usage_count).filter(CouponModel.code == normalized).scalar()
        logger.info(f"[Coupons] Redeemed {normalized} (usage={usage_count})")
        return {"code": normalized, "usage_count": usage_count}

    # === Quotes ===

    def quote_price(
        self,
        plan_id: str,
        db: Session,
        coupon_code: Optional[str] = None,
        selected_add_ons: Optional[List[AddOnSelection]] = None,
    ) -> PriceQuote:
        if not self.get_plan(plan_id):
            raise HTTPException(status_code=404, detail=f"Unknown plan: {plan_id}")

        plan_price = self.get_plan_price(plan_id)
        discount_amount = 0
        payable = plan_price
        coupon_message = None

        if coupon_code:
            validation = self.validate_coupon(coupon_code, plan_id, db)
            coupon_message = validation.message
            if validation.is_valid:
                calc = calculate_discount(plan_price, validation.discount_type, validation.discount_value)
                discount_amount = calc.discount_amount
                payable = calc.final_price

        add_ons_total = 0.0
        if selected_add_ons and self.add_on_service:
            result = self.add_on_service.validate_add_ons(plan_id, selected_add_ons, db)
            if not result.is_valid:
                raise HTTPException(status_code=400, detail=result.error_message)
            add_ons_total = result.total_price

        return PriceQuote(
            plan_id=plan_id,
            plan_price=plan_price,
            discount_amount=discount_amount,
            coupon_message=coupon_message,
            add_ons_total=add_ons_total,
            amount_payable=payable + add_ons_total,
        )
