"""User and profile API endpoints."""

from fastapi import APIRouter, Depends, Path, Request, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_optional_user
from app.rate_limit import limiter
from app.schemas.user import UpdateProfileRequest, UserListResponse, UserResponse
from app.services.account import MAX_USER_ID, get_account_service
from app.services.avatar import get_avatar_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/", response_model=UserListResponse)
def list_users(page: int = 1, limit: int = 10, db: Session = Depends(get_db)) -> UserListResponse:
    """List users, newest first."""
    users = get_account_service().list_users(db, page=page, limit=limit)
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("/search", response_model=UserListResponse)
def search_users(search: str, db: Session = Depends(get_db)) -> UserListResponse:
    """Search users by name, username or email."""
    users = get_account_service().search_users(db, search)
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("/me", response_model=UserResponse)
def get_me(
    user: CurrentUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Get the authenticated user's profile."""
    return UserResponse.model_validate(get_account_service().me(db, user))


@router.patch("/me", response_model=UserResponse)
def update_me(
    body: UpdateProfileRequest,
    user: CurrentUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Update name, email or username. Omitted fields are left unchanged."""
    changes = body.model_dump(exclude_unset=True)
    updated = get_account_service().update_profile(db, user, changes)
    return UserResponse.model_validate(updated)


@router.post("/me/profile-picture", response_model=UserResponse)
@limiter.limit("10/minute")
async def upload_profile_picture(
    request: Request,
    file: UploadFile,
    user: CurrentUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Upload a new profile picture for the authenticated user."""
    account_service = get_account_service()
    avatar_service = get_avatar_service()

    current = account_service.me(db, user)
    avatar_service.validate_upload_metadata(file.filename or "", file.content_type)

    previous = current.profile_picture
    picture_url = await avatar_service.store(current.id, file)
    try:
        updated = account_service.update_profile_picture(db, user, picture_url)
    except Exception:
        avatar_service.delete(picture_url)
        raise
    avatar_service.delete(previous)

    return UserResponse.model_validate(updated)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int = Path(ge=1, le=MAX_USER_ID), db: Session = Depends(get_db)) -> UserResponse:
    """Get a user by id."""
    return UserResponse.model_validate(get_account_service().get_user(db, user_id))
