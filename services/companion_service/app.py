"""
FastAPI service for the Rocky companion backend.

Exposes the two endpoints the mini-app talks to: quick-auth token
verification and the pending-reminder lookup against the Rocky agent's
database. Both are open to any origin so the app can call them from inside
the host client.
"""
from __future__ import annotations

import logging
import os
import typing as t
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.companion_service.store import create_reminder_engine, list_pending_reminders
from services.companion_service.verifier import (
    InvalidTokenError,
    QuickAuthVerifier,
    TokenVerifier,
    VerificationUnavailableError,
    VerifiedToken,
)
from services.shared.models import AuthVerification, ErrorResponse, StoredReminder


logger = logging.getLogger(__name__)

# Audience used when the request carries no Host header
AUTH_DOMAIN = os.getenv("AUTH_DOMAIN", "www.craycray.xyz")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and cleanup on shutdown."""
    # Startup: one engine (and pool) for the life of the process
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        app.state.engine = create_reminder_engine(database_url)
    else:
        logger.warning("DATABASE_URL is not set; reminder lookups will fail")
        app.state.engine = None
    app.state.verifier = QuickAuthVerifier()

    yield

    # Shutdown: release pooled connections
    if app.state.engine is not None:
        app.state.engine.dispose()


app = FastAPI(
    title="Rocky Companion Service",
    description="REST API for quick-auth verification and pending DevConnect reminders",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render errors as the flat `{"error": ...}` body the mini-app expects."""
    if isinstance(exc.detail, dict):
        body = ErrorResponse(**exc.detail)
    else:
        body = ErrorResponse(error=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=exc.headers,
    )


AUTH_ERRORS = {
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    500: {"model": ErrorResponse, "description": "Token verification unavailable"},
}
REMINDER_ERRORS = {
    400: {"model": ErrorResponse, "description": "inboxId is missing"},
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    500: {"model": ErrorResponse, "description": "Database not configured or unavailable"},
}


# Dependencies
def get_verifier(request: Request) -> TokenVerifier:
    return request.app.state.verifier


def get_engine(request: Request) -> Engine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=500,
            detail={
                "error": "Database not configured",
                "message": "DATABASE_URL environment variable is required",
            },
        )
    return engine


def bearer_token(request: Request) -> str:
    authorization = request.headers.get("authorization", "")
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return authorization.split(" ")[1]


def request_domain(request: Request) -> str:
    return request.headers.get("host") or AUTH_DOMAIN


def resolve_inbox_id(request: Request) -> str:
    inbox_id = request.path_params.get("inbox_id") or request.query_params.get("inboxId")
    if not inbox_id or not inbox_id.strip():
        raise HTTPException(status_code=400, detail="inboxId is required")
    return inbox_id


def authenticated_subject(
    request: Request,
    verifier: TokenVerifier = Depends(get_verifier),
) -> VerifiedToken:
    """Require a valid bearer token on a data route."""
    authorization = request.headers.get("authorization", "")
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized - Token required")

    try:
        verified = verifier.verify(authorization.split(" ")[1], request_domain(request))
    except (InvalidTokenError, VerificationUnavailableError) as e:
        logger.error("Token verification failed: %s", e)
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    logger.info("Authenticated user FID: %s", verified.subject)
    return verified


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "companion-service"}


@app.options("/api/auth")
@app.options("/api/reminders")
@app.options("/api/reminders/{inbox_id}")
async def preflight() -> Response:
    """Answer CORS preflight requests with an empty 200."""
    return Response(status_code=200)


@app.get("/api/auth", response_model=AuthVerification, responses=AUTH_ERRORS)
def verify_auth(
    request: Request,
    token: str = Depends(bearer_token),
    verifier: TokenVerifier = Depends(get_verifier),
) -> AuthVerification:
    """
    Verify a quick-auth JWT issued by the host client.

    The token's subject is the user's FID. The wallet address used as the
    reminder inbox id comes from the host's identity context, not from here.
    """
    try:
        verified = verifier.verify(token, request_domain(request))
    except InvalidTokenError as e:
        logger.error("Authentication verification failed: %s", e)
        raise HTTPException(status_code=401, detail="Invalid token")
    except VerificationUnavailableError as e:
        logger.error("Authentication verification failed: %s", e)
        raise HTTPException(status_code=500, detail="Authentication failed")

    return AuthVerification(fid=verified.subject, authenticated=True)


@app.get("/api/reminders", response_model=list[StoredReminder], responses=REMINDER_ERRORS)
@app.get("/api/reminders/{inbox_id}", response_model=list[StoredReminder], responses=REMINDER_ERRORS)
def get_pending_reminders(
    inbox_id: str = Depends(resolve_inbox_id),
    subject: VerifiedToken = Depends(authenticated_subject),
    engine: Engine = Depends(get_engine),
) -> list[StoredReminder]:
    """
    List the unsent reminders for an inbox, earliest first.

    Checks run in order: inbox id (400), bearer token (401), database
    configuration (500).
    """
    try:
        return list_pending_reminders(engine, inbox_id)
    except SQLAlchemyError as e:
        logger.error("Database error: %s", e)
        detail: dict[str, t.Any] = {"error": "Failed to fetch reminders"}
        if os.getenv("ROCKY_ENV") == "development":
            detail["details"] = str(e)
        raise HTTPException(status_code=500, detail=detail)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
