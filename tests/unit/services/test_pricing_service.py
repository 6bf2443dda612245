"""Tests for coupon maths, validation and redemption."""

from datetime import date, timedelta

import pytest
from fastapi import HTTPException

from mockhire.base.models import AddOnSelection
from mockhire.services.add_on_service import AddOnService
from mockhire.services.pricing_service import (
    PricingService,
    calculate_discount,
    format_discount_text,
    is_coupon_applicable_for_plan,
)


@pytest.fixture
def pricing():
    return PricingService(add_on_service=AddOnService())


def test_percentage_discount_rounds_half_up():
    calc = calculate_discount(999, "percentage", 20)
    assert calc.discount_amount == 200
    assert calc.final_price == 799


def test_fixed_discount_is_capped_at_price():
    calc = calculate_discount(499, "fixed", 1000)
    assert calc.discount_amount == 499
    assert calc.final_price == 0


def test_unknown_discount_type_is_no_discount():
    calc = calculate_discount(999, "bogo", 50)
    assert calc.discount_amount == 0
    assert calc.final_price == 999


@pytest.mark.parametrize("price", [0, 1, 199, 499, 999, 1299])
@pytest.mark.parametrize("kind,value", [("percentage", 0), ("percentage", 33), ("percentage", 150), ("fixed", 75)])
def test_discount_invariants(price, kind, value):
    calc = calculate_discount(price, kind, value)
    assert 0 <= calc.discount_amount <= price
    assert calc.final_price >= 0
    assert calc.final_price == price - calc.discount_amount


def test_half_split_still_adds_up():
    calc = calculate_discount(999, "percentage", 50)
    assert calc.discount_amount == 500
    assert calc.final_price == 499


def test_discount_text(coupon_factory):
    assert format_discount_text(coupon_factory(code="P20")) == "20% OFF"
    assert format_discount_text(coupon_factory(code="F100", discount_type="fixed", discount_value=100)) == "₹100 OFF"


def test_plan_applicability(coupon_factory):
    coupon = coupon_factory(code="EXEC", plan_type="executive")
    assert is_coupon_applicable_for_plan(coupon, "executive")
    assert not is_coupon_applicable_for_plan(coupon, "essential")


def test_validate_coupon_normalises_code(pricing, coupon_factory, db):
    coupon_factory(code="SAVE20")
    result = pricing.validate_coupon("  save20 ", "professional", db)
    assert result.is_valid
    assert result.discount_type == "percentage"
    assert result.discount_value == 20


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"status": "stopped"}, "no longer active"),
        ({"expiring_on": date.today() - timedelta(days=1)}, "expired"),
        ({"usage_limit": 2, "usage_count": 2}, "usage limit"),
        ({"plan_type": "executive"}, "only valid for the executive plan"),
    ],
)
def test_validate_coupon_rejections(pricing, coupon_factory, db, overrides, message):
    coupon_factory(code="NOPE", **overrides)
    result = pricing.validate_coupon("NOPE", "professional", db)
    assert not result.is_valid
    assert message in result.message


def test_validate_unknown_coupon(pricing, db):
    assert not pricing.validate_coupon("MISSING", "essential", db).is_valid


def test_list_active_coupons_filters(pricing, coupon_factory, db):
    coupon_factory(code="LIVE")
    coupon_factory(code="HIDDEN", visible=False)
    coupon_factory(code="OLD", expiring_on=date.today() - timedelta(days=1))
    coupon_factory(code="USEDUP", usage_limit=1, usage_count=1)

    codes = [c.code for c in pricing.list_active_coupons(db)]
    assert codes == ["LIVE"]


def test_redeem_stops_at_usage_limit(pricing, coupon_factory, db):
    coupon_factory(code="ONCE", usage_limit=1)

    assert pricing.redeem_coupon("once", db)["usage_count"] == 1
    with pytest.raises(HTTPException) as exc:
        pricing.redeem_coupon("ONCE", db)
    assert exc.value.status_code == 409


def test_redeem_rejects_expired_coupon(pricing, coupon_factory, db):
    coupon = coupon_factory(code="OLD", expiring_on=date.today() - timedelta(days=1))

    with pytest.raises(HTTPException) as exc:
        pricing.redeem_coupon("OLD", db)

    assert exc.value.status_code == 409
    db.refresh(coupon)
    assert coupon.usage_count == 0


def test_plan_lookup_defaults(pricing):
    assert pricing.get_plan_price("essential") == 499
    assert pricing.get_plan_duration("essential") == 30
    assert pricing.get_plan_price("unknown") == 999
    assert pricing.get_plan_duration("unknown") == 60


def test_quote_combines_coupon_and_add_ons(pricing, coupon_factory, db):
    AddOnService().seed_default_add_ons(db)
    coupon_factory(code="SAVE20")

    quote = pricing.quote_price(
        "professional",
        db,
        coupon_code="SAVE20",
        selected_add_ons=[AddOnSelection(addon_key="meeting_recording")],
    )
    assert quote.plan_price == 999
    assert quote.discount_amount == 200
    assert quote.add_ons_total == 99
    assert quote.amount_payable == 898


def test_quote_unknown_plan(pricing, db):
    with pytest.raises(HTTPException) as exc:
        pricing.quote_price("platinum", db)
    assert exc.value.status_code == 404
