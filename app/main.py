"""FastAPI Application Entry Point"""

import asyncio
import os
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.deps import build_billing_service, get_notifier
from app.api.v1.router import api_router
from app.config import settings
from app.core.exceptions import AppError
from app.core.logging import setup_logging, get_logger
from app.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from app.core.rate_limit import limiter
from app.database import check_db, close_db, init_db
from app.schemas.responses import ErrorDetail, ErrorResponse
from app.services.low_stock_service import run_low_stock_schedule

# Setup logging
setup_logging()
logger = get_logger(__name__)

STORE_RETRY_SECONDS = 5


async def connect_billing(app: FastAPI) -> None:
    """
    Wait for the database, then install the billing engine on app state.
    Billing requests are rejected with STORE_UNAVAILABLE until this finishes.
    """
    while True:
        try:
            await check_db()
            if settings.is_development:
                await init_db()
                logger.info("Database initialized")
            break
        except Exception as e:
            logger.error(f"Database not reachable, retrying in {STORE_RETRY_SECONDS}s: {e}")
            await asyncio.sleep(STORE_RETRY_SECONDS)

    app.state.billing_service = build_billing_service()
    logger.info("Billing store connected")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting application", extra={"environment": settings.ENVIRONMENT})

    app.state.billing_service = None
    tasks = [asyncio.create_task(connect_billing(app))]
    if settings.LOW_STOCK_SCHEDULE_ENABLED:
        tasks.append(asyncio.create_task(run_low_stock_schedule(get_notifier())))

    yield

    logger.info("Shutting down application")
    for task in tasks:
        task.cancel()
    for task in tasks:
        with suppress(asyncio.CancelledError):
            await task
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Retail back-office: inventory, billing and low-stock alerts",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=[settings.ALLOWED_HEADERS],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)

# Custom middleware
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestContextMiddleware)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)

# Generated receipts, read-only
if settings.RECEIPT_STORAGE == "local":
    os.makedirs(settings.RECEIPTS_DIR, exist_ok=True)
    app.mount(
        settings.RECEIPTS_URL_PREFIX,
        StaticFiles(directory=settings.RECEIPTS_DIR),
        name="receipts",
    )


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "billing_ready": getattr(request.app.state, "billing_service", None) is not None,
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


# Exception handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Map domain errors onto the error envelope"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.code}: {exc.message}",
        extra={
            "path": request.url.path,
            "error_code": exc.code,
            "correlation_id": getattr(request.state, "request_id", None),
        }
    )
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message, context=exc.context))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors"""
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "errors": exc.errors(),
            "correlation_id": getattr(request.state, "request_id", None),
        }
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "correlation_id": getattr(request.state, "request_id", None),
        },
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error"
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
