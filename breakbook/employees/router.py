"""Employee directory router — CRUD, leave balance and quota override."""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from breakbook.common.constants import EmploymentStatus
from breakbook.database import get_db
from breakbook.employees.schemas import (
    EmployeeCreate,
    EmployeeOut,
    EmployeeUpdate,
    LeaveQuotaUpdate,
)
from breakbook.employees.service import EmployeeService
from breakbook.leave.schemas import LeaveBalanceOut
from breakbook.leave.service import LeaveService

router = APIRouter(prefix="", tags=["employees"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[EmployeeOut])
async def list_employees(
    status: Optional[EmploymentStatus] = Query(None),
    department: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive name match"),
    db: AsyncSession = Depends(get_db),
):
    """List employees in the directory."""
    return await EmployeeService.list_employees(
        db, status=status, department=department, search=search,
    )


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an employee. Email must be unique."""
    return await EmployeeService.create_employee(db, body)


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_employee(db, employee_id)


# ── PUT /{id} ───────────────────────────────────────────────────────

@router.put("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Partial update. The joining date cannot change."""
    return await EmployeeService.update_employee(db, employee_id, body)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete an employee; their leave requests are removed with them."""
    await EmployeeService.delete_employee(db, employee_id)
    return Response(status_code=204)


# ── GET /{id}/leave-balance ─────────────────────────────────────────

@router.get("/{employee_id}/leave-balance", response_model=LeaveBalanceOut)
async def get_leave_balance(
    employee_id: uuid.UUID,
    as_of: Optional[date] = Query(
        None, alias="asOf", description="Reference date; defaults to today",
    ),
    db: AsyncSession = Depends(get_db),
):
    """Allocated, used, pending and available leave days."""
    return await LeaveService.get_balance(db, employee_id, as_of or date.today())


# ── PATCH /{id}/leave-balance ───────────────────────────────────────

@router.patch("/{employee_id}/leave-balance", response_model=LeaveBalanceOut)
async def update_leave_quota(
    employee_id: uuid.UUID,
    body: LeaveQuotaUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Override the employee's accrual policy / quota and return the new balance."""
    await EmployeeService.update_leave_quota(db, employee_id, body)
    return await LeaveService.get_balance(db, employee_id, date.today())
