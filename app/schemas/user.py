"""Pydantic schemas for user endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr


class UserResponse(BaseModel):
    id: int
    name: str | None
    email: str
    username: str | None
    profile_picture: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int


class UpdateProfileRequest(BaseModel):
    """Only fields present in the request body are applied."""

    name: str | None = None
    email: EmailStr | None = None
    username: str | None = None
