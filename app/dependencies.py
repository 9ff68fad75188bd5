"""Authentication dependencies for FastAPI routes."""

from dataclasses import dataclass

from fastapi import Request

from app.services.jwt import SESSION_TOKEN, get_jwt_service


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated user context, taken from a verified session token."""

    user_id: int
    email: str
    username: str | None


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def get_optional_user(request: Request) -> CurrentUser | None:
    """Extract user from the Bearer token. Returns None if missing or invalid."""
    token = _bearer_token(request)
    if not token:
        return None

    payload = get_jwt_service().verify(token, expected_type=SESSION_TOKEN)
    if not payload:
        return None

    return CurrentUser(
        user_id=int(payload["id"]),
        email=payload["email"],
        username=payload.get("username"),
    )

