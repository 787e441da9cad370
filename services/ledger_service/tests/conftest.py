from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import services.ledger_service.app.models  # noqa: F401
from services.ledger_service.app import settings as ledger_settings_module
from services.ledger_service.app.db.base import Base
from services.ledger_service.app.dependencies import (
    AdminPrincipal,
    get_admin_principal,
    get_current_user_id,
    get_optional_user_id,
    get_session,
)
from services.ledger_service.app.main import create_app
from services.ledger_service.app.services import users as user_service

ADMIN = AdminPrincipal(subject="admin-1", scopes=frozenset({"admin"}))


@pytest.fixture(autouse=True)
def ledger_env(monkeypatch):
    ledger_settings_module.ledger_settings.cache_clear()
    monkeypatch.setenv("LEDGER_OTEL_ENABLED", "false")
    monkeypatch.setenv("LEDGER_LOG_LEVEL", "WARNING")

    async def fake_run_migrations(*_args, **_kwargs) -> None:  # pragma: no cover - helper
        return None

    monkeypatch.setattr(
        "services.ledger_service.app.startup.run_alembic_migrations",
        fake_run_migrations,
    )
    yield
    ledger_settings_module.ledger_settings.cache_clear()


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    # File-backed so that separate sessions see each other's commits
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest_asyncio.fixture()
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def customer_id(session_factory) -> int:
    async with session_factory() as session:
        async with session.begin():
            user = await user_service.create_user(
                session, uid="uid-alice", email="alice@example.com", name="Alice"
            )
        return user.id


@pytest_asyncio.fixture()
async def ledger_app(session_factory, customer_id):
    async def _override_session():
        session = session_factory()
        try:
            yield session
        finally:
            await session.close()

    def _override_current_user() -> int:
        return customer_id

    def _override_admin() -> AdminPrincipal:
        return ADMIN

    app = create_app()
    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_current_user_id] = _override_current_user
    app.dependency_overrides[get_optional_user_id] = _override_current_user
    app.dependency_overrides[get_admin_principal] = _override_admin
    yield app


@pytest_asyncio.fixture()
async def secured_app(session_factory, customer_id):
    """App with real bearer-token checks and only the database swapped out."""

    async def _override_session():
        session = session_factory()
        try:
            yield session
        finally:
            await session.close()

    app = create_app()
    app.dependency_overrides[get_session] = _override_session
    yield app


@pytest.fixture()
def admin() -> AdminPrincipal:
    return ADMIN
