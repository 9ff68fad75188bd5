"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_optional_user
from app.rate_limit import limiter
from app.schemas.auth import (
    AuthPayload,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SuccessResponse,
)
from app.schemas.user import UserResponse
from app.services.account import AuthResult, get_account_service
from app.services.jwt import SESSION_TOKEN, get_jwt_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _auth_payload(result: AuthResult) -> AuthPayload:
    return AuthPayload(token=result.token, user=UserResponse.model_validate(result.user))


@router.post("/register", response_model=AuthPayload)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> AuthPayload:
    """Register a new user account."""
    result = get_account_service().register(
        db,
        email=body.email,
        password=body.password,
        name=body.name,
        username=body.username,
    )
    return _auth_payload(result)


@router.post("/login", response_model=AuthPayload)
@limiter.limit("10/minute")
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> AuthPayload:
    """Authenticate and receive a session token."""
    result = get_account_service().login(db, body.email, body.password)
    return _auth_payload(result)


@router.post("/logout", response_model=SuccessResponse)
def logout() -> SuccessResponse:
    """Log out. The client is responsible for discarding its token."""
    return SuccessResponse(success=get_account_service().logout())


@router.post("/change-password", response_model=SuccessResponse)
@limiter.limit("5/minute")
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    user: CurrentUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Change the current user's password."""
    success = get_account_service().change_password(db, user, body.old_password, body.new_password)
    return SuccessResponse(success=success)


@router.post("/forgot-password", response_model=SuccessResponse)
@limiter.limit("3/minute")
def forgot_password(request: Request, body: ForgotPasswordRequest, db: Session = Depends(get_db)) -> SuccessResponse:
    """Request a password reset. The reset link is delivered out of band."""
    return SuccessResponse(success=get_account_service().forgot_password(db, body.email))


@router.post("/reset-password", response_model=SuccessResponse)
@limiter.limit("5/minute")
def reset_password(request: Request, body: ResetPasswordRequest, db: Session = Depends(get_db)) -> SuccessResponse:
    """Reset password using an outstanding reset token."""
    return SuccessResponse(success=get_account_service().reset_password(db, body.token, body.password))


@router.get("/verify")
def verify_token(token: str) -> dict:
    """Verify a session token and return its claims."""
    payload = get_jwt_service().verify(token, expected_type=SESSION_TOKEN)

    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return {
        "valid": True,
        "id": payload["id"],
        "email": payload["email"],
        "username": payload.get("username"),
    }
