"""JWT Token Service."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.config import get_settings

SESSION_TOKEN = "session"
RESET_TOKEN = "reset"


class JWTService:
    """Issues and verifies signed, time-limited bearer tokens.

    The secret and algorithm are fixed at construction; the service holds no
    other state.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        session_ttl: timedelta = timedelta(days=7),
        reset_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        if not secret_key:
            raise ValueError("JWT secret key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.session_ttl = session_ttl
        self.reset_ttl = reset_ttl

    def issue(self, claims: dict[str, Any], ttl: timedelta) -> str:
        """Sign the given claims with an expiry ttl from now."""
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + ttl
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str, expected_type: str | None = None) -> dict[str, Any] | None:
        """Decode and validate a token. Returns None if invalid for any reason."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError:
            return None
        if "exp" not in payload or "id" not in payload:
            return None
        if expected_type is not None and payload.get("typ") != expected_type:
            return None
        return payload

    def create_session_token(self, user_id: int, email: str, username: str | None) -> str:
        """Create a session token carrying the user's identity claims."""
        claims = {"id": user_id, "email": email, "username": username, "typ": SESSION_TOKEN}
        return self.issue(claims, self.session_ttl)

    def create_reset_token(self, user_id: int, email: str) -> str:
        """Create a short-lived password reset token."""
        claims = {"id": user_id, "email": email, "typ": RESET_TOKEN}
        return self.issue(claims, self.reset_ttl)


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        settings = get_settings()
        _jwt_service = JWTService(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            session_ttl=timedelta(minutes=settings.SESSION_TOKEN_EXPIRE_MINUTES),
            reset_ttl=timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        )
    return _jwt_service
