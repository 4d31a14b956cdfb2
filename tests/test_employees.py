"""Employee directory tests — CRUD service and API, quota override, cascade."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from breakbook.common.constants import AccrualPolicyType, EmploymentStatus
from breakbook.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from breakbook.employees.schemas import EmployeeCreate, EmployeeUpdate, LeaveQuotaUpdate
from breakbook.employees.service import EmployeeService
from breakbook.leave.models import LeaveRequest
from breakbook.leave.schemas import LeaveRequestCreate
from breakbook.leave.service import LeaveService
from tests.conftest import seed_employee


def _create_payload(**overrides) -> EmployeeCreate:
    data = dict(
        name="Jane Smith",
        email="jane@example.com",
        department="HR",
        joining_date=date(2025, 5, 15),
    )
    data.update(overrides)
    return EmployeeCreate(**data)


# ═════════════════════════════════════════════════════════════════════
# SERVICE
# ═════════════════════════════════════════════════════════════════════


class TestEmployeeService:

    async def test_create_and_get(self, db: AsyncSession):
        created = await EmployeeService.create_employee(db, _create_payload())
        await db.commit()

        fetched = await EmployeeService.get_employee(db, created.id)
        assert fetched.email == "jane@example.com"
        assert fetched.status == EmploymentStatus.active
        assert fetched.accrual_policy is None

    async def test_duplicate_email_conflict(self, db: AsyncSession):
        await EmployeeService.create_employee(db, _create_payload())
        await db.commit()

        with pytest.raises(ConflictError):
            await EmployeeService.create_employee(db, _create_payload(name="Another Jane"))

    async def test_get_unknown_not_found(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await EmployeeService.get_employee(db, uuid.uuid4())

    async def test_list_filters_and_sorts(self, db: AsyncSession):
        await seed_employee(db, name="Zoe", department="HR")
        await seed_employee(db, name="Adam", department="Engineering")
        await seed_employee(db, name="Alice", department="Engineering",
                            status=EmploymentStatus.inactive)

        everyone = await EmployeeService.list_employees(db)
        engineers = await EmployeeService.list_employees(db, department="Engineering")
        active_a = await EmployeeService.list_employees(
            db, status=EmploymentStatus.active, search="a",
        )

        assert [e.name for e in everyone] == ["Adam", "Alice", "Zoe"]
        assert {e.name for e in engineers} == {"Adam", "Alice"}
        assert {e.name for e in active_a} == {"Adam"}

    async def test_update_fields(self, db: AsyncSession, test_employee):
        updated = await EmployeeService.update_employee(
            db, test_employee["id"],
            EmployeeUpdate(department="Platform", status=EmploymentStatus.inactive),
        )
        assert updated.department == "Platform"
        assert updated.status == EmploymentStatus.inactive

    async def test_joining_date_immutable(self, db: AsyncSession, test_employee):
        with pytest.raises(ValidationException) as exc_info:
            await EmployeeService.update_employee(
                db, test_employee["id"], EmployeeUpdate(joining_date=date(2023, 1, 1)),
            )
        assert "joining_date" in exc_info.value.errors

    async def test_same_joining_date_accepted(self, db: AsyncSession, test_employee):
        updated = await EmployeeService.update_employee(
            db, test_employee["id"],
            EmployeeUpdate(joining_date=test_employee["joining_date"], name="J. Doe"),
        )
        assert updated.name == "J. Doe"

    async def test_null_required_field_rejected(self, db: AsyncSession, test_employee):
        with pytest.raises(ValidationException):
            await EmployeeService.update_employee(
                db, test_employee["id"], EmployeeUpdate(name=None),
            )

    async def test_nullable_field_can_be_cleared(self, db: AsyncSession, test_employee):
        updated = await EmployeeService.update_employee(
            db, test_employee["id"], EmployeeUpdate(department=None),
        )
        await db.commit()

        assert updated.department is None
        fetched = await EmployeeService.get_employee(db, test_employee["id"])
        assert fetched.department is None

    async def test_quota_override_and_reset(self, db: AsyncSession, test_employee):
        emp = await EmployeeService.update_leave_quota(
            db, test_employee["id"],
            LeaveQuotaUpdate(accrual_policy=AccrualPolicyType.prorated, leave_quota=Decimal("24")),
        )
        assert emp.accrual_policy == AccrualPolicyType.prorated
        assert emp.leave_quota == Decimal("24")

        emp = await EmployeeService.update_leave_quota(
            db, test_employee["id"], LeaveQuotaUpdate(accrual_policy=None, leave_quota=None),
        )
        assert emp.accrual_policy is None
        assert emp.leave_quota is None

    async def test_delete_cascades_to_leave_requests(self, db: AsyncSession, test_employee):
        await LeaveService.apply_leave(db, LeaveRequestCreate(
            employee_id=test_employee["id"],
            start_date=date(2024, 3, 4),
            end_date=date(2024, 3, 5),
        ))

        await EmployeeService.delete_employee(db, test_employee["id"])
        await db.commit()

        remaining = (await db.execute(
            select(func.count()).select_from(LeaveRequest)
        )).scalar_one()
        assert remaining == 0
        with pytest.raises(NotFoundException):
            await EmployeeService.get_employee(db, test_employee["id"])


# ═════════════════════════════════════════════════════════════════════
# API ENDPOINTS
# ═════════════════════════════════════════════════════════════════════


class TestEmployeeAPI:

    async def test_create_employee(self, client: AsyncClient):
        resp = await client.post("/api/v1/employees", json={
            "name": "John Doe",
            "email": "john@example.com",
            "department": "Engineering",
            "joiningDate": "2025-04-10",
        })

        assert resp.status_code == 201
        body = resp.json()
        assert body["joiningDate"] == "2025-04-10"
        assert body["status"] == "active"
        assert body["leaveQuota"] is None

    async def test_create_duplicate_returns_409(self, client: AsyncClient, test_employee):
        resp = await client.post("/api/v1/employees", json={
            "name": "Other John",
            "email": test_employee["email"],
            "joiningDate": "2025-04-10",
        })
        assert resp.status_code == 409
        assert resp.json()["kind"] == "conflict"

    async def test_invalid_email_returns_422(self, client: AsyncClient):
        resp = await client.post("/api/v1/employees", json={
            "name": "Nobody",
            "email": "not-an-email",
            "joiningDate": "2025-04-10",
        })
        assert resp.status_code == 422

    async def test_list_and_get(self, client: AsyncClient, test_employee):
        listed = await client.get("/api/v1/employees")
        fetched = await client.get(f"/api/v1/employees/{test_employee['id']}")

        assert [e["email"] for e in listed.json()] == ["john@example.com"]
        assert fetched.json()["name"] == "John Doe"

    async def test_update_joining_date_returns_422(self, client: AsyncClient, test_employee):
        resp = await client.put(
            f"/api/v1/employees/{test_employee['id']}",
            json={"joiningDate": "2020-01-01"},
        )
        assert resp.status_code == 422
        assert resp.json()["kind"] == "validation-error"

    async def test_delete_employee(self, client: AsyncClient, test_employee):
        resp = await client.delete(f"/api/v1/employees/{test_employee['id']}")
        assert resp.status_code == 204

        missing = await client.get(f"/api/v1/employees/{test_employee['id']}")
        assert missing.status_code == 404

    async def test_patch_leave_quota_returns_balance(self, client: AsyncClient, test_employee):
        resp = await client.patch(
            f"/api/v1/employees/{test_employee['id']}/leave-balance",
            json={"leaveQuota": 10},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["allocated"] == 10
        assert body["available"] == 10

    async def test_balance_unknown_employee_returns_404(self, client: AsyncClient):
        resp = await client.get(f"/api/v1/employees/{uuid.uuid4()}/leave-balance")
        assert resp.status_code == 404
