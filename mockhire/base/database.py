from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from mockhire.base.config import settings

Base = declarative_base()

# Create engine
engine_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    engine_args["connect_args"] = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True, **engine_args)

# Session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables if not exist."""
    # Register every table on Base.metadata before create_all
    from mockhire.models import tables  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
