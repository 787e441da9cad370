from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    uid: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    photo_url: str | None = None


class UserResponse(BaseModel):
    id: int
    uid: str
    email: EmailStr
    name: str
    photo_url: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
