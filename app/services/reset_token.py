"""Password reset token lifecycle."""

import hashlib
import logging

from sqlalchemy.orm import Session

from app.errors import InvalidTokenError
from app.models.user import User
from app.services.jwt import RESET_TOKEN, JWTService

logger = logging.getLogger("account_service")


def digest_token(token: str) -> str:
    """SHA-256 hex digest of a reset token, as stored on the user row."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class ResetTokenPolicy:
    """Mints, persists and invalidates single-use password reset tokens.

    Only the digest of the outstanding token is stored. Issuing a new token
    overwrites it, so earlier tokens for the same user stop matching.
    """

    def __init__(self, jwt_service: JWTService) -> None:
        self.jwt_service = jwt_service

    def issue(self, db: Session, user: User) -> str:
        """Create a reset token for the user and persist its digest."""
        token = self.jwt_service.create_reset_token(user.id, user.email)
        user.forgot_password_token = digest_token(token)
        db.commit()
        return token

    def consume(self, db: Session, token: str) -> User:
        """Return the user the token was issued to. Raises InvalidTokenError otherwise.

        The token must verify and must be the one currently stored for the
        user named by its claims.
        """
        payload = self.jwt_service.verify(token, expected_type=RESET_TOKEN)
        if not payload:
            raise InvalidTokenError()

        user = (
            db.query(User)
            .filter(User.id == payload["id"], User.forgot_password_token == digest_token(token))
            .first()
        )
        if not user:
            logger.info("Rejected reset token for user %s: not outstanding", payload["id"])
            raise InvalidTokenError()
        return user

    @staticmethod
    def clear(user: User) -> None:
        """Invalidate the user's outstanding reset token. Caller commits."""
        user.forgot_password_token = None
