from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from .db.session import async_session_factory
from .settings import ledger_settings

logger = logging.getLogger(__name__)

ACCEPTED_SCOPES = {"access", "wallet_access"}


@dataclass(frozen=True)
class AdminPrincipal:
    """Proof that the caller passed the admin check; admin operations require one."""

    subject: str
    scopes: frozenset[str]


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


def _decode_bearer(request: Request) -> dict[str, Any]:
    settings = ledger_settings()
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    token = auth.split(" ", 1)[1].strip()
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as exc:
        logger.warning("ledger.auth.jwt_decode_failed", extra={"error": str(exc)})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc


def _token_scopes(decoded: dict[str, Any]) -> frozenset[str]:
    scope = decoded.get("scope") or ""
    if isinstance(scope, str):
        return frozenset(scope.split())
    return frozenset(str(item) for item in scope)


def get_current_user_id(request: Request) -> int:
    """Extract the customer's numeric ID from a JWT bearer token."""
    decoded = _decode_bearer(request)
    if not _token_scopes(decoded) & ACCEPTED_SCOPES:
        logger.info("ledger.auth.scope_rejected", extra={"scope": decoded.get("scope")})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token scope")

    sub = decoded.get("sub")
    if isinstance(sub, str) and sub.isdigit():
        return int(sub)
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")


def get_optional_user_id(request: Request) -> int | None:
    """Customer ID when a bearer token is sent, ``None`` for guests."""
    if not request.headers.get("authorization"):
        return None
    return get_current_user_id(request)


def get_admin_principal(request: Request) -> AdminPrincipal:
    decoded = _decode_bearer(request)
    scopes = _token_scopes(decoded)
    if ledger_settings().admin_scope not in scopes:
        logger.info("ledger.auth.admin_required", extra={"sub": decoded.get("sub")})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return AdminPrincipal(subject=str(decoded.get("sub") or "admin"), scopes=scopes)


SessionDep = Annotated[AsyncSession, Depends(get_session)]
CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]
OptionalUserIdDep = Annotated[int | None, Depends(get_optional_user_id)]
AdminDep = Annotated[AdminPrincipal, Depends(get_admin_principal)]
