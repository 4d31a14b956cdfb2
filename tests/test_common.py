"""Tests for common utilities — filters, sorting, keyed locks, settings
parsing and the RFC 7807 error bodies."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from breakbook.common.exceptions import InsufficientBalanceError, InvalidTransitionError
from breakbook.common.filters import _get_column, apply_filters, apply_sorting
from breakbook.common.locks import KeyedLock
from breakbook.config import Settings
from breakbook.employees.models import Employee
from tests.conftest import seed_employee


# ═════════════════════════════════════════════════════════════════════
# FILTER TESTS
# ═════════════════════════════════════════════════════════════════════


class TestApplyFilters:
    """Tests for apply_filters utility."""

    async def test_filter_by_equality(self, db: AsyncSession):
        await seed_employee(db, name="Alice")
        await seed_employee(db, name="Bob")

        query = apply_filters(select(Employee), Employee, {"name": "Alice"})
        employees = (await db.execute(query)).scalars().all()
        assert [e.name for e in employees] == ["Alice"]

    async def test_filter_none_values_skipped(self, db: AsyncSession):
        await seed_employee(db)

        query = apply_filters(select(Employee), Employee, {"name": None})
        assert len((await db.execute(query)).scalars().all()) == 1

    async def test_filter_by_from_to_range(self, db: AsyncSession):
        await seed_employee(db, name="E1", joining_date=date(2024, 1, 1))
        await seed_employee(db, name="E2", joining_date=date(2025, 6, 1))
        await seed_employee(db, name="E3", joining_date=date(2026, 1, 1))

        query = apply_filters(select(Employee), Employee, {
            "joining_date__from": date(2025, 1, 1),
            "joining_date__to": date(2025, 12, 31),
        })
        employees = (await db.execute(query)).scalars().all()
        assert [e.name for e in employees] == ["E2"]

    async def test_filter_by_in(self, db: AsyncSession):
        await seed_employee(db, name="A", department="HR")
        await seed_employee(db, name="B", department="Sales")
        await seed_employee(db, name="C", department="Engineering")

        query = apply_filters(select(Employee), Employee, {"department__in": ["HR", "Sales"]})
        employees = (await db.execute(query)).scalars().all()
        assert {e.name for e in employees} == {"A", "B"}

    async def test_unknown_column_ignored(self, db: AsyncSession):
        await seed_employee(db)

        query = apply_filters(select(Employee), Employee, {"no_such_column": "x"})
        assert len((await db.execute(query)).scalars().all()) == 1


class TestApplySorting:

    async def test_descending(self, db: AsyncSession):
        await seed_employee(db, name="Alpha")
        await seed_employee(db, name="Omega")

        query = apply_sorting(select(Employee), Employee, "-name")
        employees = (await db.execute(query)).scalars().all()
        assert [e.name for e in employees] == ["Omega", "Alpha"]

    def test_unknown_or_empty_sort_is_noop(self):
        query = select(Employee)
        assert apply_sorting(query, Employee, None) is query
        assert apply_sorting(query, Employee, "-drop_table") is query

    def test_get_column_rejects_non_columns(self):
        assert _get_column(Employee, "email") is not None
        assert _get_column(Employee, "__tablename__") is None


# ═════════════════════════════════════════════════════════════════════
# KEYED LOCK
# ═════════════════════════════════════════════════════════════════════


class TestKeyedLock:

    async def test_same_key_serialised(self):
        locks = KeyedLock()
        events: list[str] = []

        async def worker(name: str):
            async with locks.hold("emp"):
                events.append(f"{name}-in")
                await asyncio.sleep(0.01)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert events in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    async def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        entered = asyncio.Event()

        async def first():
            async with locks.hold("x"):
                await asyncio.wait_for(entered.wait(), timeout=1)

        async def second():
            async with locks.hold("y"):
                entered.set()

        await asyncio.gather(first(), second())

    async def test_idle_locks_released(self):
        locks = KeyedLock()
        async with locks.hold("emp"):
            assert len(locks) == 1
        assert len(locks) == 0


# ═════════════════════════════════════════════════════════════════════
# SETTINGS
# ═════════════════════════════════════════════════════════════════════


class TestSettings:

    def test_holiday_patterns_parsed(self):
        s = Settings(HOLIDAYS='["01-26", "12-25"]')
        assert s.holiday_patterns == [(1, 26), (12, 25)]

    def test_malformed_holidays_dropped(self):
        s = Settings(HOLIDAYS='["13-01", "xx", "02-29"]')
        assert s.holiday_patterns == [(2, 29)]

    def test_cors_origins_fallback(self):
        s = Settings(CORS_ORIGINS="not json")
        assert s.cors_origins_list == ["http://localhost:5173"]


# ═════════════════════════════════════════════════════════════════════
# ERROR BODIES
# ═════════════════════════════════════════════════════════════════════


class TestErrorFormatting:

    def test_fractional_balance_rendered_compactly(self):
        exc = InsufficientBalanceError(3, Decimal("2.50"))
        assert exc.detail == "Requested days (3) exceed available balance (2.5)."

    def test_transition_error_names_state(self):
        exc = InvalidTransitionError("abc", "approved", "rejected")
        assert exc.status_code == 409
        assert "is approved" in exc.detail

    async def test_health_endpoint(self, client: AsyncClient):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    async def test_problem_body_shape(self, client: AsyncClient):
        resp = await client.get("/api/v1/employees/00000000-0000-0000-0000-000000000000")
        body = resp.json()

        assert resp.status_code == 404
        assert body["type"].endswith("/not-found")
        assert body["status"] == 404
        assert body["instance"] == "/api/v1/employees/00000000-0000-0000-0000-000000000000"
