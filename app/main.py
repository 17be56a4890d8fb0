from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import logging
import os

import redis

from .api.routes.auth import router as auth_router
from .api.routes.booking import router as booking_router
from .api.routes.records import router as records_router
from .api.routes.chatbot import router as chatbot_router
from .core.config import settings
from .core.database import init_db, get_redis
from .core.errors import BookingValidationError, PersistenceError
from .services.notifications import build_notification_service
from .services.validation import check_price_table

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Appointment booking, online consultations and medical reports",
    openapi_url="/api/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Middleware setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Only add TrustedHostMiddleware in production, not in testing
if not os.getenv("TESTING"):
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
    )

# Custom middleware for request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

# Exception handlers
@app.exception_handler(BookingValidationError)
async def booking_validation_handler(request: Request, exc: BookingValidationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "errors": exc.errors
        }
    )

BOOKING_PATHS = ("/api/book-appointment", "/api/book-consultation")

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """
    Booking endpoints report malformed input the same way as missing fields:
    a 400 keyed by request field name. Other routes keep the default 422.
    """
    if request.url.path not in BOOKING_PATHS:
        return await request_validation_exception_handler(request, exc)

    errors = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        if len(loc) > 1 and isinstance(loc[1], str):
            errors.setdefault(loc[1], f"Invalid value: {error.get('msg')}")
        else:
            errors.setdefault("body", "Request body must be a JSON object")

    logger.warning(f"Validation error for {request.url.path}: {sorted(errors)}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": errors
        }
    )

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    detail = getattr(exc, "detail", None)
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": detail if detail and detail != "Not Found" else "The requested resource was not found",
            "path": str(request.url.path)
        }
    )

@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": "Internal Server Error",
            "message": exc.detail
        }
    )

@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }
    )

# Include routers
app.include_router(auth_router)
app.include_router(booking_router)
app.include_router(records_router)
app.include_router(chatbot_router)

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info(f"Starting {settings.APP_NAME}...")

    db_url = settings.get_database_url
    logger.info(f"Using database backend: {db_url.split(':', 1)[0]}")

    # A store outage disables the features that need it, not the process
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")

    try:
        get_redis().ping()
    except redis.RedisError as e:
        logger.warning(f"Session store unavailable, logins will fail: {str(e)}")

    for problem in check_price_table(settings.CONSULTATION_PRICES, settings.MAX_CONSULTATION_AMOUNT):
        logger.error(f"Consultation price above ceiling, type disabled for booking: {problem}")

    app.state.notifier = build_notification_service(settings)

    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    logger.info(f"Shutting down {settings.APP_NAME}...")

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health"
    }

# API Info endpoint
@app.get("/api/info")
async def api_info():
    """API information endpoint."""
    notifier = getattr(app.state, "notifier", None)
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "notifications": {
            "email": bool(notifier and notifier.config.email_enabled),
            "sms": bool(notifier and notifier.config.sms_enabled),
        },
        "endpoints": {
            "register": "/register",
            "login": "/login",
            "logout": "/logout",
            "user": "/api/user",
            "bookAppointment": "/api/book-appointment",
            "bookConsultation": "/api/book-consultation",
            "consultationConfig": "/api/consultation-config",
            "doctors": "/api/doctors",
            "medicalReports": "/api/medical-reports",
            "chatbot": "/api/chatbot",
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3000")),
        reload=settings.DEBUG,
        log_level="info"
    )
