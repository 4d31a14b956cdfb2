"""Employee directory service — CRUD plus the leave-quota override."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from breakbook.common.constants import EmploymentStatus
from breakbook.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from breakbook.common.filters import apply_filters, apply_sorting
from breakbook.employees.models import Employee
from breakbook.employees.schemas import EmployeeCreate, EmployeeUpdate, LeaveQuotaUpdate

logger = logging.getLogger(__name__)


class EmployeeService:
    """Async employee directory operations."""

    # ── Read ────────────────────────────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        *,
        status: Optional[EmploymentStatus] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = "name",
    ) -> Sequence[Employee]:
        """List employees, optionally filtered by status, department or name."""

        query = apply_filters(
            select(Employee),
            Employee,
            {
                "status": status,
                "department": department,
                "name__ilike": search,
            },
        )
        query = apply_sorting(query, Employee, sort)
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> Employee:
        result = await db.execute(
            select(Employee).where(Employee.id == employee_id),
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeCreate,
    ) -> Employee:
        """Create a new employee record."""

        employee = Employee(**data.model_dump())

        db.add(employee)
        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            if "email" in str(exc.orig):
                raise ConflictError("email", data.email)
            raise

        logger.info("Employee %s created (%s)", employee.id, employee.email)
        return employee

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
    ) -> Employee:
        """Partial-update an existing employee. The joining date is immutable."""

        employee = await EmployeeService.get_employee(db, employee_id)

        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        joining_date = changes.pop("joining_date", None)
        if joining_date is not None and joining_date != employee.joining_date:
            raise ValidationException(
                {"joining_date": ["Joining date cannot be changed once set."]}
            )
        if not changes:
            return employee

        columns = Employee.__table__.columns
        for field, value in changes.items():
            if value is None and not columns[field].nullable:
                raise ValidationException({field: ["Field cannot be null."]})
            setattr(employee, field, value)

        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            if "email" in str(exc.orig):
                raise ConflictError("email", changes.get("email", ""))
            raise

        logger.info("Employee %s updated: %s", employee.id, sorted(changes))
        return employee

    @staticmethod
    async def update_leave_quota(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: LeaveQuotaUpdate,
    ) -> Employee:
        """Override (or reset to default with ``null``) the employee's
        accrual policy and quota."""

        employee = await EmployeeService.get_employee(db, employee_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(employee, field, value)
        await db.flush()

        logger.info("Leave quota for employee %s set to %s", employee.id, changes)
        return employee

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> None:
        """Delete an employee together with their leave requests."""

        employee = await EmployeeService.get_employee(db, employee_id)
        await db.delete(employee)
        await db.flush()
        logger.info("Employee %s deleted", employee_id)
