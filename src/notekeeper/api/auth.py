"""Auth API — registration, login, current user.

Learn: Routes for user authentication:
- POST /auth/register → create a user, returns user + token
- POST /auth/login → email/password → user + token
- GET /auth/me → current user info (bearer token required)

Routes translate domain errors into HTTP status codes. A wrong password
and an unknown email produce the same 401 body.
"""

from fastapi import APIRouter, Depends, HTTPException

from notekeeper.auth.dependencies import (
    CurrentIdentity,
    get_auth_service,
    get_current_user,
)
from notekeeper.auth.service import AuthService
from notekeeper.errors import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    NotFoundError,
)
from notekeeper.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserRead,
)

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest, svc: AuthService = Depends(get_auth_service)
):
    """Create a new user account and log it in."""
    try:
        result = await svc.register(body.email, body.password)
    except DuplicateIdentityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return AuthResponse(user=result.user, token=result.token)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    """Login with email and password → JWT."""
    try:
        result = await svc.login(body.email, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthResponse(user=result.user, token=result.token)


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(get_auth_service),
):
    """Get the current authenticated user's info."""
    try:
        return await svc.get_user(identity.user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
