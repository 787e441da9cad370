from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import InvalidState, NotFound
from ..models import User
from . import wallet as wallet_service


async def create_user(
    session: AsyncSession,
    *,
    uid: str,
    email: str,
    name: str,
    photo_url: str | None = None,
) -> User:
    """Create or refresh a user and make sure it owns exactly one wallet.

    Repeat sign-ins with the same ``uid`` update the profile. The wallet is
    created in the caller's transaction, so a user row never commits without
    one.
    """
    email = email.strip().lower()
    user = await session.scalar(select(User).where(User.uid == uid))
    clash = await session.scalar(select(User).where(User.email == email))
    if clash is not None and (user is None or clash.id != user.id):
        raise InvalidState(f"Email {email} already belongs to another user", email=email)

    if user is None:
        user = User(uid=uid, email=email, name=name, photo_url=photo_url)
        session.add(user)
        await session.flush()
        logger.bind(user_id=user.id).info("User {} created", user.id)
    else:
        user.email = email
        user.name = name
        user.photo_url = photo_url
        await session.flush()

    await wallet_service.create_wallet(session, user.id)
    return user


async def get_user_by_id(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found", user_id=user_id)
    return user


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    return await session.scalar(select(User).where(User.email == email.strip().lower()))


async def get_user_by_uid(session: AsyncSession, uid: str) -> User | None:
    return await session.scalar(select(User).where(User.uid == uid))
