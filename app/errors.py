"""Account operation failures.

Each error carries the HTTP status it maps to and a generic message. Messages
never describe why a credential or token was rejected.
"""


class AccountError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AccountError):
    status_code = 404
    default_message = "User not found"


class ConflictError(AccountError):
    status_code = 409
    default_message = "User already exists"


class UnauthorizedError(AccountError):
    """Credentials were supplied but did not match."""

    status_code = 401
    default_message = "Invalid credentials"


class UnauthenticatedError(AccountError):
    """No valid session identity accompanied the request."""

    status_code = 401
    default_message = "Not authenticated"


class InvalidTokenError(AccountError):
    status_code = 400
    default_message = "Invalid or expired token"


class InvalidInputError(AccountError):
    status_code = 400
    default_message = "Invalid input"
