"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The token carries the user id in "sub" and an absolute expiry in "exp",
signed with a symmetric secret (HS256). Nothing is stored server-side,
so a token stays valid until it expires. Rotating the secret
invalidates every outstanding token at once.

No other module decodes tokens. Everything else treats them as
opaque strings and asks TokenCodec.verify() for the subject.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from notekeeper.errors import ConfigurationError, InvalidOrExpiredTokenError

DEFAULT_EXPIRE_DAYS = 7
# Symmetric algorithms only; the codec signs and verifies with one secret
SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")


class TokenCodec:
    """Issues and verifies signed session tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_days: int = DEFAULT_EXPIRE_DAYS,
    ):
        if not secret:
            raise ConfigurationError(
                "NOTEKEEPER_JWT_SECRET must be set. Generate one with: "
                "notekeeper gen-secret"
            )
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(
                f"Unsupported JWT algorithm {algorithm!r}; "
                f"use one of {', '.join(SUPPORTED_ALGORITHMS)}"
            )
        if expire_days < 1:
            raise ConfigurationError("Token lifetime must be at least one day")
        self._secret = secret
        self.algorithm = algorithm
        self.expire_days = expire_days

    def issue(
        self,
        subject_id: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a token for subject_id, valid for expire_days by default."""
        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = timedelta(days=self.expire_days)
        payload = {
            "sub": str(subject_id),
            "iat": now,
            "exp": now + expires_delta,
            # Two tokens minted in the same second must still differ
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Verify a token and return its subject id.

        Raises InvalidOrExpiredTokenError on any failure: malformed,
        bad signature, or expired. The reason is not exposed.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.InvalidTokenError:
            raise InvalidOrExpiredTokenError()

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidOrExpiredTokenError()
        return subject
