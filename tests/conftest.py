"""Shared test fixtures — async DB, client, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Configure settings before any other import touches pydantic-settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from breakbook.common.constants import AccrualPolicyType, EmploymentStatus
from breakbook.database import Base, get_db
from breakbook.main import create_app

# Import ALL model modules so create_all sees every table
import breakbook.common.audit  # noqa: F401
import breakbook.employees.models  # noqa: F401
import breakbook.leave.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT/CHAR ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() as a SQLite custom function."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


@pytest.fixture
def session_factory() -> async_sessionmaker:
    """Factory for tests that need several independent sessions."""
    return TestSessionFactory


# ── Model factories ─────────────────────────────────────────────────

def _make_employee(
    *,
    name: str = "Test User",
    email: Optional[str] = None,
    department: Optional[str] = "Engineering",
    joining_date: date = date(2024, 1, 1),
    status: EmploymentStatus = EmploymentStatus.active,
    accrual_policy: Optional[AccrualPolicyType] = None,
    leave_quota: Optional[Decimal] = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        email=email or f"user.{uuid.uuid4().hex[:8]}@example.com",
        department=department,
        joining_date=joining_date,
        status=status,
        accrual_policy=accrual_policy,
        leave_quota=leave_quota,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def seed_employee(db: AsyncSession, **overrides) -> dict:
    """Insert an employee built by ``_make_employee`` and commit it."""
    from breakbook.employees.models import Employee

    data = _make_employee(**overrides)
    db.add(Employee(**data))
    await db.commit()
    return data


@pytest.fixture
async def test_employee(db) -> dict:
    """Active employee who joined 2024-01-01 on the default flat policy."""
    return await seed_employee(db, name="John Doe", email="john@example.com")
