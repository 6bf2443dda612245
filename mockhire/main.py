from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from mockhire.base.config import settings
from mockhire.base.database import SessionLocal, init_db
from mockhire.base.error_handlers import register_exception_handlers
from mockhire.base.logging_config import app_logger as logger
from mockhire.base.logging_config import configure_root_logging
from mockhire.routers import (
    add_ons,
    bookings,
    coupons,
    interviewers,
    matching,
    payments,
    reservations,
    resume_reviews,
    webhooks,
)
from mockhire.services.add_on_service import AddOnService

configure_root_logging()

# --- FastAPI app instance ---
app = FastAPI(
    title="MockHire Booking API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# --- CORS config ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Prometheus metrics ---
if settings.ENABLE_PROMETHEUS:
    Instrumentator().instrument(app).expose(app)


# --- Logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"📥 {request.method} request to {request.url.path}")
    response = await call_next(request)
    logger.info(f"📤 Response: {response.status_code} for {request.url.path}")
    return response


# --- Exception handlers ---
register_exception_handlers(app)


# --- Startup ---
@app.on_event("startup")
def on_startup():
    init_db()
    if settings.SEED_DEFAULT_ADD_ONS:
        db = SessionLocal()
        try:
            AddOnService().seed_default_add_ons(db)
        finally:
            db.close()
    logger.info(f"🚀 {settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")


# --- API Routers ---
app.include_router(coupons.router, prefix="/coupons", tags=["Coupons"])
app.include_router(add_ons.router, prefix="/add-ons", tags=["Add-ons"])
app.include_router(interviewers.router, prefix="/interviewers", tags=["Interviewers"])
app.include_router(matching.router, prefix="/matching", tags=["Matching"])
app.include_router(reservations.router, prefix="/reservations", tags=["Reservations"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
app.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
app.include_router(resume_reviews.router, prefix="/resume-reviews", tags=["Resume Reviews"])


# --- System endpoints ---
@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}


@app.get("/version", tags=["System"])
def version_check():
    return {
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "payment_mode": "sandbox" if settings.PAYMENT_TEST_MODE else "production",
        "auto_booking": settings.ENABLE_AUTO_BOOKING,
    }
