"""Leave router — apply, approve/reject/cancel, list."""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from breakbook.common.constants import MAX_PAGE_SIZE, LeaveStatus
from breakbook.database import get_db
from breakbook.leave.schemas import (
    LeaveCancelRequest,
    LeaveDecisionRequest,
    LeaveRequestCreate,
    LeaveRequestFilters,
    LeaveRequestOut,
)
from breakbook.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leaves"])

# Matches e.g. "pending" and "PENDING"
STATUS_PATTERN = "(?i)^(" + "|".join(s.value for s in LeaveStatus) + ")$"


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=201)
async def apply_leave(
    body: LeaveRequestCreate,
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. Validates employee, dates, working days, balance and overlap."""
    return await LeaveService.apply_leave(db, body)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[LeaveRequestOut])
async def list_leaves(
    employee_id: Optional[uuid.UUID] = Query(None, alias="employeeId"),
    status: Optional[str] = Query(
        None, pattern=STATUS_PATTERN, description="Leave status, any letter case",
    ),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    """List leave requests, newest first. The date window keeps requests
    overlapping [startDate, endDate]."""
    filters = LeaveRequestFilters(
        employee_id=employee_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    return await LeaveService.list_leaves(db, filters, limit=limit)


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{request_id}", response_model=LeaveRequestOut)
async def get_leave(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_leave(db, request_id)


# ── POST /{id}/approve ──────────────────────────────────────────────

@router.post("/{request_id}/approve", response_model=LeaveRequestOut)
async def approve_leave(
    request_id: uuid.UUID,
    body: LeaveDecisionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Approve a pending leave request."""
    return await LeaveService.approve_leave(
        db, request_id, body.approver_id, remarks=body.remarks,
    )


# ── POST /{id}/reject ───────────────────────────────────────────────

@router.post("/{request_id}/reject", response_model=LeaveRequestOut)
async def reject_leave(
    request_id: uuid.UUID,
    body: LeaveDecisionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Reject a pending leave request."""
    return await LeaveService.reject_leave(
        db, request_id, body.approver_id, remarks=body.remarks,
    )


# ── POST /{id}/cancel ───────────────────────────────────────────────

@router.post("/{request_id}/cancel", response_model=LeaveRequestOut)
async def cancel_leave(
    request_id: uuid.UUID,
    body: LeaveCancelRequest,
    db: AsyncSession = Depends(get_db),
):
    """Cancel own pending leave request."""
    return await LeaveService.cancel_leave(db, request_id, body.employee_id)
