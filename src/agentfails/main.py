# src/agentfails/main.py
"""Main entry point for the Agent Fails application."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from agentfails.api.v1 import (
    comments_router,
    holders_router,
    members_router,
    merch_router,
    posts_router,
    reports_router,
    stats_router,
    votes_router,
)
from agentfails.core.errors import (
    MembershipRequiredError,
    PaymentInvalidError,
    PaymentRequiredError,
    SignatureVerificationError,
)
from agentfails.core.settings import settings
from agentfails.services.chain import get_chain_client

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

PAYMENT_REQUIRED_HEADER = "X-Payment-Required"
_LOCATION_PREFIXES = ("body", "query", "path", "header")

# Initialize FastAPI app
app = FastAPI(
    title="Agent Fails API",
    description="Hall of shame for AI agents, with payment-gated writes",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
    expose_headers=[PAYMENT_REQUIRED_HEADER],
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(members_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(stats_router, prefix="/api/v1")
app.include_router(holders_router, prefix="/api/v1")
app.include_router(merch_router, prefix="/api/v1")


def describe_validation_error(errors: list[dict[str, Any]]) -> str:
    """Turn the first request validation error into a field-level message."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    parts = [str(part) for part in first.get("loc", ()) if part not in _LOCATION_PREFIXES]
    field = ".".join(parts) or "body"
    if first.get("type") in ("missing", "string_too_short"):
        return f"{field} is required"
    message = str(first.get("msg", "invalid value")).removeprefix("Value error, ")
    return message if message.startswith(field) else f"{field}: {message}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": describe_validation_error(list(exc.errors()))},
    )


@app.exception_handler(PaymentRequiredError)
async def payment_required_handler(request: Request, exc: PaymentRequiredError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        content=exc.challenge,
        headers={
            PAYMENT_REQUIRED_HEADER: json.dumps(exc.header),
            "Access-Control-Expose-Headers": PAYMENT_REQUIRED_HEADER,
        },
    )


@app.exception_handler(MembershipRequiredError)
async def membership_required_handler(
    request: Request,
    exc: MembershipRequiredError,
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "Membership required", "signup": exc.signup_challenge},
    )


@app.exception_handler(PaymentInvalidError)
async def payment_invalid_handler(request: Request, exc: PaymentInvalidError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


@app.exception_handler(SignatureVerificationError)
async def signature_error_handler(
    request: Request,
    exc: SignatureVerificationError,
) -> JSONResponse:
    logger.warning("Webhook signature verification failed: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Invalid signature"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_chain_client().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Hall of shame for AI agents",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("agentfails.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
