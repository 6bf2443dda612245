# mockhire/routers/coupons.py

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import (
    CouponRedeemRequest,
    CouponResponse,
    CouponValidationRequest,
    CouponValidationResult,
    DiscountCalculation,
    DiscountRequest,
    PlanResponse,
    PriceQuote,
    PriceQuoteRequest,
)
from mockhire.services.add_on_service import AddOnService
from mockhire.services.pricing_service import PricingService, calculate_discount

router = APIRouter(tags=["Coupons"])
pricing = PricingService(add_on_service=AddOnService())
logger = logging.getLogger("coupons_router")


@router.get("/active", summary="List coupons currently on offer", response_model=List[CouponResponse])
def list_active_coupons(db: Session = Depends(get_db)):
    return pricing.list_active_coupons(db)


@router.post("/validate", summary="Check a coupon code against a plan", response_model=CouponValidationResult)
def validate_coupon(req: CouponValidationRequest, db: Session = Depends(get_db)):
    return pricing.validate_coupon(req.code, req.plan_type, db)


@router.post("/calculate", summary="Apply a discount to a price", response_model=DiscountCalculation)
def calculate(req: DiscountRequest):
    return calculate_discount(req.original_price, req.discount_type, req.discount_value)


@router.post("/redeem", summary="Count one use of a coupon")
def redeem_coupon(req: CouponRedeemRequest, db: Session = Depends(get_db)):
    return pricing.redeem_coupon(req.code, db)


@router.get("/plans", summary="Interview plans and prices", response_model=List[PlanResponse])
def list_plans():
    return pricing.get_plans()


@router.post("/quote", summary="Amount payable for a plan, coupon and add-ons", response_model=PriceQuote)
def quote(req: PriceQuoteRequest, db: Session = Depends(get_db)):
    logger.info(f"[Quote] plan={req.plan_id} coupon={req.coupon_code} add_ons={len(req.selected_add_ons)}")
    return pricing.quote_price(req.plan_id, db, coupon_code=req.coupon_code, selected_add_ons=req.selected_add_ons)
