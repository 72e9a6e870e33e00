"""Auth service — registration, login, token verification.

Learn: This is the only place that sees plaintext passwords. They are
hashed (or checked) in a worker thread because bcrypt is deliberately
slow, and they are never logged. Unknown email and wrong password
raise the same InvalidCredentialsError so callers cannot probe which
addresses are registered.
"""

import asyncio
import secrets
from dataclasses import dataclass

import structlog

from notekeeper.auth.jwt import TokenCodec
from notekeeper.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from notekeeper.db.stores import UserStore
from notekeeper.errors import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    NotFoundError,
)
from notekeeper.schemas.auth import UserRead

logger = structlog.get_logger()


@dataclass
class AuthResult:
    """A user plus a freshly issued token.

    The user is already a UserRead, so the hash never leaves the service.
    """

    user: UserRead
    token: str


class AuthService:
    """Orchestrates the user store, password hashing, and token codec."""

    def __init__(
        self,
        users: UserStore,
        tokens: TokenCodec,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ):
        self.users = users
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        # Verified against when the email is unknown, so both login
        # failure paths spend the same bcrypt time.
        self._dummy_hash = hash_password(secrets.token_urlsafe(16), bcrypt_rounds)

    async def register(self, email: str, password: str) -> AuthResult:
        if await self.users.find_by_email(email) is not None:
            logger.info("auth.register_duplicate")
            raise DuplicateIdentityError()

        # Hash before touching the store: a hashing failure leaves no record
        password_hash = await asyncio.to_thread(
            hash_password, password, self.bcrypt_rounds
        )
        user = await self.users.create(email=email, password_hash=password_hash)

        logger.info("auth.registered", user_id=str(user.id))
        return AuthResult(
            user=UserRead.model_validate(user),
            token=self.tokens.issue(str(user.id)),
        )

    async def login(self, email: str, password: str) -> AuthResult:
        user = await self.users.find_by_email(email)
        password_hash = user.password_hash if user is not None else self._dummy_hash

        valid = await asyncio.to_thread(verify_password, password, password_hash)
        if user is None or not valid:
            logger.info("auth.login_failed")
            raise InvalidCredentialsError()

        logger.info("auth.logged_in", user_id=str(user.id))
        return AuthResult(
            user=UserRead.model_validate(user),
            token=self.tokens.issue(str(user.id)),
        )

    def verify_token(self, token: str) -> str:
        """Return the subject id of a valid token.

        Raises InvalidOrExpiredTokenError otherwise.
        """
        return self.tokens.verify(token)

    async def get_user(self, user_id: str) -> UserRead:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)
