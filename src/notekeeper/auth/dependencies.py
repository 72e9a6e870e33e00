"""FastAPI auth dependencies — the access gate.

Learn: These are used as Depends() in route handlers (or at
include_router level) to extract and validate the current identity
from the request. The only accepted credential is
"Authorization: Bearer <token>".

authenticate_header() is the framework-free part: a header value in,
a subject id out, or UnauthenticatedError. A missing header or a
different scheme is rejected without ever calling the token verifier.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException, Request

from notekeeper.auth.jwt import TokenCodec
from notekeeper.auth.service import AuthService
from notekeeper.container import Services
from notekeeper.errors import InvalidOrExpiredTokenError, UnauthenticatedError
from notekeeper.services.note_service import NoteService

BEARER_PREFIX = "Bearer "


class CurrentIdentity:
    """Represents the authenticated user making the request."""

    def __init__(self, user_id: str):
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!r})"


def authenticate_header(authorization: Optional[str], tokens: TokenCodec) -> str:
    """Resolve an Authorization header value to a subject id."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthenticatedError("Unauthorized: No token provided")

    token = authorization[len(BEARER_PREFIX):]
    try:
        return tokens.verify(token)
    except InvalidOrExpiredTokenError:
        raise UnauthenticatedError("Unauthorized: Invalid or expired token")


# ─── Service accessors ──────────────────────────────────


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_auth_service(services: Services = Depends(get_services)) -> AuthService:
    return services.auth


def get_note_service(services: Services = Depends(get_services)) -> NoteService:
    return services.notes


# ─── Gate ───────────────────────────────────────────────


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    services: Services = Depends(get_services),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if missing or invalid).

    Learn: On success the subject id is bound to request.state and to
    structlog's contextvars, so every log line for the rest of the
    request carries user_id.
    """
    try:
        user_id = authenticate_header(authorization, services.tokens)
    except UnauthenticatedError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user_id = user_id
    structlog.contextvars.bind_contextvars(user_id=user_id)
    return CurrentIdentity(user_id=user_id)
