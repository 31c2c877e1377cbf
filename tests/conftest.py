"""Shared fixtures: in-memory SQLite database, seeded RBAC data and an HTTP client."""

import os

# Settings are read once at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters-0123456789")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import AsyncGenerator, Iterable

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cms_api.models.orm import Base, PermissionORM, RoleORM, UserORM
from cms_api.security.auth import create_access_token
from cms_api.security.password import get_password_service

TEST_PASSWORD = "correct-horse"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def app(session_maker: async_sessionmaker[AsyncSession]) -> FastAPI:
    """Application with the database dependency pointed at the test engine."""
    from cms_api.database import get_db
    from cms_api.main import create_app

    app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# =============================================================================
# Data helpers
# =============================================================================


async def make_permission(
    session: AsyncSession,
    code: str,
    name: str | None = None,
    module: str | None = None,
) -> PermissionORM:
    """Insert a permission; name and module are derived from the code by default."""
    permission = PermissionORM(
        name=name or code,
        description=f"Ability to {code}",
        code=code,
        module=module or code.split(":", 1)[0],
    )
    session.add(permission)
    await session.commit()
    return permission


async def make_role(
    session: AsyncSession,
    name: str,
    permissions: Iterable[PermissionORM] = (),
    is_default: bool = False,
    grants_all: bool = False,
) -> RoleORM:
    """Insert a role holding ``permissions``."""
    role = RoleORM(
        name=name,
        description=f"{name} role",
        is_default=is_default,
        grants_all=grants_all,
        permissions=list(permissions),
    )
    session.add(role)
    await session.commit()
    return role


async def make_user(
    session: AsyncSession,
    email: str,
    role: RoleORM | None = None,
    is_active: bool = True,
) -> UserORM:
    """Insert a user with the shared test password."""
    user = UserORM(
        email=email,
        name=email.split("@", 1)[0],
        password_hash=get_password_service().hash_password(TEST_PASSWORD),
        is_active=is_active,
        role_id=role.id if role is not None else None,
    )
    session.add(user)
    await session.commit()
    return user


def auth_headers(user: UserORM) -> dict[str, str]:
    """Bearer header for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}
