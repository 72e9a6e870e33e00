"""Domain errors raised by services and the auth layer.

Learn: Services never raise HTTPException. They raise these, and the
route layer maps each one to a status code. Messages are part of the
contract: InvalidCredentialsError always carries the same text whether
the email is unknown or the password is wrong.
"""


class NotekeeperError(Exception):
    """Base class for all domain errors."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ValidationError(NotekeeperError):
    """Malformed input that passed schema validation but breaks a rule."""

    default_message = "Invalid input"


class DuplicateIdentityError(NotekeeperError):
    default_message = "User with this email already exists"


class InvalidCredentialsError(NotekeeperError):
    default_message = "Invalid email or password"


class InvalidOrExpiredTokenError(NotekeeperError):
    default_message = "Invalid or expired token"


class UnauthenticatedError(NotekeeperError):
    default_message = "Authentication required"


class ForbiddenError(NotekeeperError):
    default_message = "Access to this note is denied"


class NotFoundError(NotekeeperError):
    default_message = "Not found"


class ConfigurationError(NotekeeperError):
    """Fatal start-up problem, e.g. a missing signing secret."""

    default_message = "Invalid configuration"
