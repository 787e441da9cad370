from __future__ import annotations

from fastapi import APIRouter, status

from ..dependencies import AdminDep, SessionDep
from ..schemas import UserCreate, UserResponse
from ..services import users as user_service

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def upsert_user(payload: UserCreate, session: SessionDep, admin: AdminDep) -> UserResponse:
    """Register a signed-in user and open their wallet; repeat calls refresh the profile."""
    async with session.begin():
        user = await user_service.create_user(
            session,
            uid=payload.uid,
            email=str(payload.email),
            name=payload.name,
            photo_url=payload.photo_url,
        )
    await session.refresh(user)
    return UserResponse.model_validate(user)
