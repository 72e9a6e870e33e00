"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects every note route without relying
on each handler to remember it. Health and auth routers are open
(/auth/me checks the token itself).
"""

from fastapi import APIRouter, Depends

from notekeeper.api.auth import router as auth_router
from notekeeper.api.health import router as health_router
from notekeeper.api.notes import router as notes_router
from notekeeper.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid bearer token
api_router.include_router(notes_router, tags=["notes"], dependencies=_auth)
