"""FastAPI application: trip sharing endpoints."""

from __future__ import annotations

import logging
import re
import threading
from typing import Any

from dotenv import load_dotenv
from fastapi import BackgroundTasks, Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from getback import __version__
from getback.api.schemas import (
    TRIP_ID_PATTERN,
    HealthResponse,
    JoinTripRequest,
    SubscriptionResponse,
    SuccessResponse,
    TripResponse,
    UserTripsResponse,
)
from getback.application.context import AppContext, make_app_context
from getback.application.contracts import MembershipFailure
from getback.application.membership import create_trip, delete_trip, join_trip
from getback.application.notifications import notify_subscribers, subscribe
from getback.application.search import search_trips
from getback.config.settings import resolve_settings
from getback.domain.enums import Direction, FailureKind, TripErrorCode
from getback.domain.exceptions import ValidationError
from getback.domain.models import Subscription, Trip, User
from getback.domain.validation import build_search_criteria
from getback.security.auth import check_bearer, current_user_email
from getback.security.redact import redact_sensitive

_api_logger = logging.getLogger("getback.api")

load_dotenv()

_startup_settings = resolve_settings()
_TRIP_ID_RE = re.compile(TRIP_ID_PATTERN)

app = FastAPI(
    title="getback",
    version=__version__,
    docs_url="/docs" if _startup_settings.enable_docs else None,
    redoc_url=None,
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_startup_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

_context: AppContext | None = None
_context_lock = threading.Lock()


def get_app_context() -> AppContext:
    """Process-wide context, built on first use. Tests override this dependency."""
    global _context
    if _context is None:
        with _context_lock:
            if _context is None:
                _context = make_app_context()
    return _context


def _direction(direction: str) -> Direction:
    try:
        return Direction.from_path(direction)
    except ValueError:
        raise HTTPException(status_code=404, detail="unknown direction") from None


def _require_trip_id(trip_id: str) -> str:
    if not _TRIP_ID_RE.match(trip_id or ""):
        raise HTTPException(status_code=400, detail="bad trip ID")
    return trip_id


# ── response mapping ──────────────────────────────────

_CLIENT_MESSAGES = {
    FailureKind.VALIDATION: "invalid trip fields",
    FailureKind.NOT_FOUND: "unknown trip",
    FailureKind.TRIP_FULL: "trip full",
    FailureKind.ALREADY_MEMBER: "already a member",
}


def _failure_response(failure: MembershipFailure) -> JSONResponse:
    if failure.is_client_error:
        # reference misses echo the escaped value, e.g. "airport XYZ does not exist"
        content: dict[str, Any] = {"detail": _CLIENT_MESSAGES.get(failure.kind, failure.message)}
        if failure.fields:
            content["fields"] = failure.fields
        return JSONResponse(status_code=400, content=content)
    _api_logger.error("request failed: %s %s", failure.kind.value, redact_sensitive(failure.message))
    return JSONResponse(status_code=500, content={"detail": "internal server error"})


def _trip_payload(trip: Trip) -> dict[str, Any]:
    body = TripResponse(**trip.model_dump(), seats_left=trip.seats_left)
    return body.model_dump(by_alias=True, mode="json")


def _success_payload(_: bool) -> dict[str, Any]:
    return SuccessResponse().model_dump()


def _subscription_payload(subscription: Subscription) -> dict[str, Any]:
    body = SubscriptionResponse(**subscription.model_dump(exclude={"direction"}), direction=subscription.direction.value)
    return body.model_dump(by_alias=True, mode="json")


@app.exception_handler(Exception)
async def _unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    _api_logger.error("%s %s failed: %s", request.method, request.url.path, redact_sensitive(str(exc)))
    return JSONResponse(status_code=500, content={"detail": "internal server error"})


# ── routes ────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@app.get("/diagnostics")
def diagnostics(
    authorization: str | None = Header(default=None),
    ctx: AppContext = Depends(get_app_context),
):
    """Store backend and outstanding reconciliation work. Bearer-protected."""
    settings = resolve_settings()
    if not settings.enable_diagnostics:
        raise HTTPException(status_code=404, detail="Not Found")
    if not settings.diagnostics_token:
        raise HTTPException(status_code=503, detail="diagnostics token not configured")
    check_bearer(authorization, settings.diagnostics_token)
    return {
        "version": __version__,
        "stores": {
            "trips": getattr(ctx.trip_store, "backend", "unknown"),
            "users": getattr(ctx.user_store, "backend", "unknown"),
        },
        "reconciliation": {"unresolved": ctx.reconciliation_log.unresolved_count()},
        "mail": {"enabled": ctx.emailer.is_send_active()},
    }


@app.post("/trips/{direction}")
def create_trip_route(
    background: BackgroundTasks,
    direction: Direction = Depends(_direction),
    payload: dict[str, Any] = Body(...),
    email: str = Depends(current_user_email),
    ctx: AppContext = Depends(get_app_context),
):
    def _created(trip: Trip) -> dict[str, Any]:
        background.add_task(notify_subscribers, ctx, trip, direction)
        return _trip_payload(trip)

    return create_trip(ctx, email, payload, direction).case_of(left=_failure_response, right=_created)


@app.post("/trips/{direction}/join")
def join_trip_route(
    req: JoinTripRequest,
    direction: Direction = Depends(_direction),
    email: str = Depends(current_user_email),
    ctx: AppContext = Depends(get_app_context),
):
    trip_id = _require_trip_id(req.trip_id)
    return join_trip(ctx, email, trip_id, direction).case_of(left=_failure_response, right=_success_payload)


@app.post("/trips/{direction}/search")
def search_trips_route(
    direction: Direction = Depends(_direction),
    payload: dict[str, Any] = Body(...),
    email: str = Depends(current_user_email),
    ctx: AppContext = Depends(get_app_context),
):
    try:
        criteria = build_search_criteria(payload)
    except ValidationError as exc:
        return JSONResponse(status_code=400, content={"detail": "missing fields", "fields": exc.fields})
    return [_trip_payload(trip) for trip in search_trips(ctx, email, criteria, direction)]


@app.get("/trips/{direction}/{trip_id}")
def get_trip_route(
    trip_id: str,
    direction: Direction = Depends(_direction),
    email: str = Depends(current_user_email),
    ctx: AppContext = Depends(get_app_context),
):
    _require_trip_id(trip_id)

    def _missing(code: TripErrorCode) -> JSONResponse:
        if code is TripErrorCode.NOT_FOUND:
            return JSONResponse(status_code=404, content={"detail": "unknown trip"})
        _api_logger.error("trip lookup failed: %s", code.value)
        return JSONResponse(status_code=500, content={"detail": "internal server error"})

    return ctx.trip_store.get_trip(trip_id, direction).case_of(left=_missing, right=_trip_payload)


@app.delete("/trips/{direction}/{trip_id}")
def delete_trip_route(
    trip_id: str,
    direction: Direction = Depends(_direction),
    email: str = Depends(current_user_email),
    ctx: AppContext = Depends(get_app_context),
):
    _require_trip_id(trip_id)
    return delete_trip(ctx, email, trip_id, direction).case_of(left=_failure_response, right=_success_payload)


@app.get("/users/me/trips", response_model=UserTripsResponse, response_model_by_alias=True)
def my_trips(
    email: str = Depends(current_user_email),
    ctx: AppContext = Depends(get_app_context),
):
    user = ctx.user_store.get_user(email) or User(email=email)
    return UserTripsResponse(**user.model_dump())


@app.post("/subscriptions/{direction}")
def subscribe_route(
    direction: Direction = Depends(_direction),
    payload: dict[str, Any] = Body(...),
    email: str = Depends(current_user_email),
    ctx: AppContext = Depends(get_app_context),
):
    return subscribe(ctx, email, payload, direction).case_of(left=_failure_response, right=_subscription_payload)


__all__ = ["app", "get_app_context"]
