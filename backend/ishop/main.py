"""
iShop Payments Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       lifespan() builds the gateway client and payment service at startup
       and releases them at shutdown.
Who:   uvicorn (`uvicorn ishop.main:app`).

Exception Handlers:
    ┌────────────────────────────────────────────────────────────────┐
    │ ValidationError        → 400 validation_error                  │
    │ RequestValidationError → 400 validation_error                  │
    │ VerificationRejected   → 400 verification_rejected             │
    │ GatewayError           → 500 {message, error: upstream detail} │
    │ ForbiddenError         → 403 forbidden                         │
    │ StorageError           → 500 storage_error                     │
    │ IShopError             → 500 server_error                      │
    │ Exception              → 500 internal_server_error             │
    └────────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → RazorpayClient → PaymentService
    Shutdown: close gateway client → dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ishop.config import settings
from ishop.database import dispose_engine
from ishop.exceptions import (
    IShopError,
    ValidationError,
    VerificationRejected,
    GatewayError,
    StorageError,
    ForbiddenError,
)
from ishop.middleware.request_id import RequestIDMiddleware, request_id_var
from ishop.middleware.logging import RequestLoggingMiddleware
from ishop.routes import health, payment
from ishop.services.gateway_client import RazorpayClient
from ishop.services.payment_service import PaymentService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configure root logging once, to stdout, at settings.log_level."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the long-lived payment dependencies and tear them down on exit.

    The gateway client is constructed exactly once here from configuration.
    Changing RAZORPAY_KEY_ID or RAZORPAY_SECRET requires a restart.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("iShop Payments Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving /health; order creation will fail with a GatewayError
        logger.error("Configuration error: %s", str(e))

    gateway = RazorpayClient.from_settings(settings)
    app.state.payment_service = PaymentService(
        gateway=gateway,
        secret=settings.razorpay_secret.get_secret_value(),
        unique_order_confirmation=settings.payment_unique_order_confirmation,
    )
    logger.info(
        "Gateway client ready: key_id=%s currency=%s url=%s",
        settings.masked_key_id,
        settings.payment_currency,
        settings.razorpay_api_url,
    )
    if settings.payment_unique_order_confirmation:
        logger.info("Duplicate confirmations for an order will not be stored")
    if not settings.admin_api_key.get_secret_value():
        logger.warning("ADMIN_API_KEY is not set; the payment lookup endpoint is not gated")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("iShop Payments Backend shutting down...")
    await gateway.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every application error to an explicit response.

    Logged context may contain order and payment ids; the secret and raw
    signatures are never part of an exception's context. Each domain
    handler records its error code on request.state for the access log.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        request.state.error_code = "validation_error"
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body failed schema parsing (e.g. amount is not a number)."""
        rid = request_id_var.get("")
        request.state.error_code = "validation_error"
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Request body rejected: %s", rid, errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request body is invalid",
                "details": {"errors": errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(VerificationRejected)
    async def handle_verification_rejected(request: Request, exc: VerificationRejected):
        # PaymentService already logged the rejection as a warning
        rid = request_id_var.get("")
        request.state.error_code = "verification_rejected"
        logger.info("[%s] Verification rejected | Context: %s", rid, exc.context)
        return JSONResponse(
            status_code=400,
            content={
                "error": "verification_rejected",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        rid = request_id_var.get("")
        request.state.error_code = "forbidden"
        logger.warning(
            "[%s] Forbidden: %s %s | Context: %s",
            rid, request.method, request.url.path, exc.context,
        )
        return JSONResponse(
            status_code=403,
            content={
                "error": "forbidden",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError):
        rid = request_id_var.get("")
        request.state.error_code = "gateway_error"
        logger.error("[%s] Gateway error: %s | Context: %s", rid, exc.detail, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "message": exc.message,
                "error": exc.detail,
                "request_id": rid,
            },
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        request.state.error_code = "storage_error"
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "storage_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(IShopError)
    async def handle_app_error(request: Request, exc: IShopError):
        rid = request_id_var.get("")
        request.state.error_code = "server_error"
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Stack trace goes to the log only, never into the response.

        Runs outside the request middleware, so the access log never sees
        this response and X-Request-ID is set here.
        """
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error on %s %s: %s",
            rid,
            request.method,
            request.url.path,
            type(exc).__name__,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "Internal Server Error!",
                "request_id": rid,
            },
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="iShop Payments API",
        description=(
            "Creates Razorpay payment orders and verifies signed payment "
            "confirmations before recording them."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(payment.router)
    app.include_router(health.router)

    return app


app = create_app()
