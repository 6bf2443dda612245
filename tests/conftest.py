"""Shared fixtures and utilities for tests."""

import os
import tempfile
from datetime import date, timedelta

# Settings and log handlers are built at import time
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="mockhire-logs-"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "")
os.environ.setdefault("SMTP_USER", "")
os.environ.setdefault("GOOGLE_CALENDAR_ENABLED", "false")
os.environ.setdefault("PAYMENT_TEST_APP_ID", "test-app-id")
os.environ.setdefault("PAYMENT_TEST_SECRET_KEY", "test-secret")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mockhire.base.database import Base, get_db, init_db
from mockhire.main import app
from mockhire.models.tables import (
    CouponModel,
    InterviewerModel,
    PaymentSessionModel,
    ProfileModel,
    new_id,
)
from mockhire.utils.time_slots import WEEKDAYS


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_token(user_id: str = "user-1") -> str:
    return jwt.encode({"sub": user_id}, "unverified", algorithm="HS256")


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token('user-1')}"}


@pytest.fixture
def bearer():
    return lambda user_id: {"Authorization": f"Bearer {make_token(user_id)}"}


# === Factories ===

def next_weekday(name: str, after: date = None) -> date:
    """Next date strictly after ``after`` (default today) falling on ``name``."""
    start = (after or date.today()) + timedelta(days=1)
    target = WEEKDAYS.index(name)
    return start + timedelta(days=(target - start.weekday()) % 7)


def slot_text(day: date, start: str = "10:00", end: str = "11:00") -> str:
    return f"{WEEKDAYS[day.weekday()]}, {day.strftime('%d/%m/%Y')} {start}-{end}"


def make_profile(db, email="interviewer@example.com", full_name="Asha Rao", role="interviewer") -> ProfileModel:
    profile = ProfileModel(id=new_id(), email=email, full_name=full_name, role=role)
    db.add(profile)
    db.commit()
    return profile


def make_interviewer(db, email=None, full_name="Asha Rao", **overrides) -> InterviewerModel:
    profile = make_profile(db, email=email or f"{new_id()[:8]}@example.com", full_name=full_name)
    fields = dict(
        id=new_id(),
        user_id=profile.id,
        experience_years=5,
        skills=["Python", "System Design"],
        technologies=["Django", "PostgreSQL"],
        availability_days=list(WEEKDAYS[:5]),
        time_slots={},
        is_eligible=True,
        company="Acme",
        position="Staff Engineer",
    )
    fields.update(overrides)
    interviewer = InterviewerModel(**fields)
    db.add(interviewer)
    db.commit()
    return interviewer


def make_coupon(db, code="SAVE20", **overrides) -> CouponModel:
    fields = dict(
        code=code,
        discount_type="percentage",
        discount_value=20,
        status="active",
        expiring_on=date.today() + timedelta(days=30),
        plan_type="all",
        usage_limit=None,
        usage_count=0,
        visible=True,
    )
    fields.update(overrides)
    coupon = CouponModel(**fields)
    db.add(coupon)
    db.commit()
    return coupon


def make_payment_session(db, interviewer=None, time_slot=None, **overrides) -> PaymentSessionModel:
    candidate = {
        "full_name": "Ravi Kumar",
        "email": "ravi@example.com",
        "target_role": "Backend Engineer",
        "experience": "5",
    }
    if time_slot:
        candidate["time_slot"] = time_slot
    fields = dict(
        id=new_id(),
        user_id="user-1",
        candidate_data=candidate,
        amount=999,
        payment_status="processing",
        provider_order_id=f"order_{new_id()[:8]}",
        matched_interviewer={"interviewer_id": interviewer.id} if interviewer else None,
        selected_plan="professional",
        selected_add_ons=[],
        add_ons_total=0,
    )
    fields.update(overrides)
    session = PaymentSessionModel(**fields)
    db.add(session)
    db.commit()
    return session


@pytest.fixture
def interviewer_factory(db):
    return lambda **kw: make_interviewer(db, **kw)


@pytest.fixture
def coupon_factory(db):
    return lambda **kw: make_coupon(db, **kw)


@pytest.fixture
def payment_session_factory(db):
    return lambda **kw: make_payment_session(db, **kw)


@pytest.fixture
def upcoming_slot():
    """Returns (date, slot text) for the next given weekday after today."""
    def _slot(weekday="Tuesday", start="10:00", end="11:00"):
        day = next_weekday(weekday)
        return day, slot_text(day, start, end)

    return _slot
