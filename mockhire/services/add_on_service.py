# mockhire/services/add_on_service.py

import logging
from typing import Iterable, List, Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from mockhire.base.models import (
    AddOnResponse,
    AddOnSelection,
    AddOnValidationResult,
    ValidatedAddOn,
)
from mockhire.models.tables import AddOnModel, PaymentSessionModel

logger = logging.getLogger("add_on_service")

DEFAULT_ADD_ONS = [
    {
        "addon_key": "resume_review",
        "name": "Resume Review",
        "description": "Written review of your resume by the interviewer",
        "price": 199,
        "category": "service",
        "requires_plan": None,
        "max_quantity": 1,
    },
    {
        "addon_key": "meeting_recording",
        "name": "Meeting Recording",
        "description": "Recording of the interview session",
        "price": 99,
        "category": "enhancement",
        "requires_plan": None,
        "max_quantity": 1,
    },
    {
        "addon_key": "priority_support",
        "name": "Priority Support",
        "description": "Faster scheduling and support responses",
        "price": 149,
        "category": "premium",
        "requires_plan": "professional",
        "max_quantity": 1,
    },
    {
        "addon_key": "extended_feedback",
        "name": "Extended Feedback",
        "description": "Detailed written feedback with an improvement plan",
        "price": 299,
        "category": "premium",
        "requires_plan": "professional",
        "max_quantity": 1,
    },
]


class AddOnService:
    """
    Catalogue of paid extras. Prices are always taken from the catalogue rows;
    a client-supplied price is never trusted.
    """

    def get_available_add_ons(self, db: Session) -> List[AddOnResponse]:
        rows = (
            db.query(AddOnModel)
            .filter(AddOnModel.is_active.is_(True))
            .order_by(AddOnModel.category.asc(), AddOnModel.price.asc())
            .all()
        )
        return [AddOnResponse.model_validate(r) for r in rows]

    def get_add_ons_for_plan(self, plan_type: str, db: Session) -> List[AddOnResponse]:
        rows = (
            db.query(AddOnModel)
            .filter(
                AddOnModel.is_active.is_(True),
                or_(AddOnModel.requires_plan.is_(None), AddOnModel.requires_plan == plan_type),
            )
            .order_by(AddOnModel.category.asc(), AddOnModel.price.asc())
            .all()
        )
        logger.info(f"[AddOns] {len(rows)} add-ons available for plan {plan_type}")
        return [AddOnResponse.model_validate(r) for r in rows]

    def validate_add_ons(
        self, plan_type: str, selection: Iterable[AddOnSelection], db: Session
    ) -> AddOnValidationResult:
        selection = list(selection or [])
        if not selection:
            return AddOnValidationResult(is_valid=True)

        keys = {s.addon_key for s in selection}
        catalogue = {
            row.addon_key: row
            for row in db.query(AddOnModel).filter(AddOnModel.addon_key.in_(keys)).all()
        }

        validated: List[ValidatedAddOn] = []
        for item in selection:
            row = catalogue.get(item.addon_key)
            if row is None:
                return AddOnValidationResult(is_valid=False, error_message=f"Add-on {item.addon_key} not found")
            if not row.is_active:
                return AddOnValidationResult(is_valid=False, error_message=f"Add-on {row.name} is not available")
            if row.requires_plan and row.requires_plan != plan_type:
                return AddOnValidationResult(
                    is_valid=False,
                    error_message=f"Add-on {row.name} requires the {row.requires_plan} plan",
                )
            if item.quantity < 1 or item.quantity > row.max_quantity:
                return AddOnValidationResult(
                    is_valid=False,
                    error_message=f"Invalid quantity for {row.name}. Max allowed: {row.max_quantity}",
                )
            validated.append(
                ValidatedAddOn(
                    addon_key=row.addon_key,
                    quantity=item.quantity,
                    price=row.price,
                    total=row.price * item.quantity,
                )
            )

        return AddOnValidationResult(
            is_valid=True,
            validated_add_ons=validated,
            total_price=sum(v.total for v in validated),
        )

    def calculate_add_ons_total(self, selection: Iterable[AddOnSelection], db: Session) -> float:
        total = 0.0
        for item in selection or []:
            row = db.query(AddOnModel).filter_by(addon_key=item.addon_key, is_active=True).first()
            if row:
                total += row.price * item.quantity
        return total

    def attach_to_payment_session(
        self,
        session_id: str,
        plan_type: str,
        selection: List[AddOnSelection],
        db: Session,
        user_id: Optional[str] = None,
    ) -> AddOnValidationResult:
        query = db.query(PaymentSessionModel).filter_by(id=session_id)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        session = query.first()
        if not session:
            raise HTTPException(status_code=404, detail="Payment session not found")

        result = self.validate_add_ons(plan_type, selection, db)
        if not result.is_valid:
            raise HTTPException(status_code=400, detail=result.error_message)

        session.selected_add_ons = [v.model_dump() for v in result.validated_add_ons]
        session.add_ons_total = result.total_price
        db.commit()

        logger.info(f"[AddOns] Session {session_id}: {len(result.validated_add_ons)} add-ons, total={result.total_price}")
        return result

    def seed_default_add_ons(self, db: Session) -> int:
        if db.query(AddOnModel).count() > 0:
            return 0
        for item in DEFAULT_ADD_ONS:
            db.add(AddOnModel(**item))
        db.commit()
        logger.info(f"[AddOns] Seeded {len(DEFAULT_ADD_ONS)} default add-ons")
        return len(DEFAULT_ADD_ONS)
