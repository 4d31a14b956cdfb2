"""Leave service layer — leave application, approvals, cancellation, listing.

Business logic:
  - Leave application validated in a fixed order (employee, dates, joining
    date, working days, balance, overlap); the first failing rule wins
  - Application serialised per employee (in-process lock + row lock on the
    employee) and committed before the lock is released
  - Approve / reject / cancel as compare-and-set transitions out of PENDING
  - Read-only listing with employee / status / date-window filters
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from breakbook.common.audit import create_audit_entry
from breakbook.common.constants import (
    ACTIVE_LEAVE_STATUSES,
    EmploymentStatus,
    LeaveStatus,
)
from breakbook.common.exceptions import (
    ForbiddenException,
    InactiveEmployeeError,
    InsufficientBalanceError,
    InternalError,
    InvalidDateRangeError,
    InvalidTransitionError,
    NotFoundException,
    OverlappingRequestError,
    PreEmploymentLeaveError,
    ZeroWorkingDaysError,
)
from breakbook.common.filters import apply_filters, apply_sorting
from breakbook.common.locks import employee_locks
from breakbook.employees.models import Employee
from breakbook.leave.balance import BalanceCalculator
from breakbook.leave.calendar import HolidayCalendar, count_working_days
from breakbook.leave.models import LeaveRequest
from breakbook.leave.schemas import (
    LeaveBalanceOut,
    LeaveRequestCreate,
    LeaveRequestFilters,
    LeaveRequestOut,
)

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: apply, approve, reject, cancel, list, balance."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Employee:
        query = select(Employee).where(Employee.id == employee_id)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    async def _get_request(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveRequest:
        result = await db.execute(
            select(LeaveRequest).where(LeaveRequest.id == request_id)
        )
        leave_req = result.scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_req

    @staticmethod
    async def _find_overlap(
        db: AsyncSession,
        employee_id: uuid.UUID,
        start_date: date,
        end_date: date,
    ) -> Optional[LeaveRequest]:
        """First PENDING/APPROVED request of the employee sharing a day
        with [start_date, end_date]."""

        result = await db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status.in_(ACTIVE_LEAVE_STATUSES),
                LeaveRequest.start_date <= end_date,
                LeaveRequest.end_date >= start_date,
            )
            .order_by(LeaveRequest.start_date)
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def _commit(db: AsyncSession, context: str) -> None:
        try:
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Store failure while %s", context)
            raise InternalError(f"Could not save changes while {context}.") from exc

    # ─────────────────────────────────────────────────────────────────
    # Balance
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_balance(
        db: AsyncSession,
        employee_id: uuid.UUID,
        as_of: date,
    ) -> LeaveBalanceOut:
        """Leave position of an employee as of *as_of*."""

        employee = await LeaveService._get_employee(db, employee_id)
        return await BalanceCalculator.balance(db, employee, as_of)

    # ─────────────────────────────────────────────────────────────────
    # Apply Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        data: LeaveRequestCreate,
        *,
        calendar: Optional[HolidayCalendar] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequestOut:
        """Apply for leave. Checks run in this order, first failure wins:

        1. Employee exists and is active
        2. start_date <= end_date
        3. start_date on or after the joining date
        4. At least one working day in the range
        5. Working days fit in the balance available as of end_date
        6. No overlap with a pending/approved request

        On success a PENDING request is committed with its working-day
        count frozen.
        """

        now = now or datetime.now(timezone.utc)

        async with employee_locks.hold(data.employee_id):
            # ── Load employee (row-locked until commit) ─────────────
            employee = await LeaveService._get_employee(
                db, data.employee_id, for_update=True,
            )
            if employee.status == EmploymentStatus.inactive:
                raise InactiveEmployeeError(employee.id)

            # ── Date sanity ─────────────────────────────────────────
            if data.start_date > data.end_date:
                raise InvalidDateRangeError(data.start_date, data.end_date)

            if data.start_date < employee.joining_date:
                raise PreEmploymentLeaveError(data.start_date, employee.joining_date)

            # ── Working days ────────────────────────────────────────
            days_requested = count_working_days(
                data.start_date, data.end_date, calendar,
            )
            if days_requested == 0:
                raise ZeroWorkingDaysError(data.start_date, data.end_date)

            # ── Balance (accrual credited up to the last leave day) ─
            balance = await BalanceCalculator.balance(db, employee, data.end_date)
            if days_requested > balance.available:
                raise InsufficientBalanceError(days_requested, balance.available)

            # ── Overlap ─────────────────────────────────────────────
            existing = await LeaveService._find_overlap(
                db, employee.id, data.start_date, data.end_date,
            )
            if existing is not None:
                raise OverlappingRequestError(
                    existing.id, existing.start_date, existing.end_date,
                )

            # ── Create leave request ────────────────────────────────
            leave_request = LeaveRequest(
                id=uuid.uuid4(),
                employee_id=employee.id,
                start_date=data.start_date,
                end_date=data.end_date,
                days_requested=days_requested,
                reason=data.reason,
                status=LeaveStatus.pending,
                created_at=now,
                updated_at=now,
            )
            db.add(leave_request)
            await db.flush()

            await create_audit_entry(
                db,
                action="create",
                entity_type="leave_request",
                entity_id=leave_request.id,
                actor_id=employee.id,
                new_values={
                    "start_date": data.start_date.isoformat(),
                    "end_date": data.end_date.isoformat(),
                    "days_requested": days_requested,
                    "status": LeaveStatus.pending.value,
                },
            )

            await LeaveService._commit(db, "applying for leave")

        logger.info(
            "Leave %s applied by employee %s: %s..%s (%d days)",
            leave_request.id, employee.id,
            data.start_date, data.end_date, days_requested,
        )
        return LeaveRequestOut.model_validate(leave_request)

    # ─────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _transition(
        db: AsyncSession,
        leave_req: LeaveRequest,
        target: LeaveStatus,
        *,
        actor_id: uuid.UUID,
        now: datetime,
        values: dict,
    ) -> LeaveRequestOut:
        """Move *leave_req* from PENDING to *target* with compare-and-set.

        The UPDATE only matches while the row is still PENDING, so of two
        concurrent decisions exactly one succeeds.
        """

        action = target.value
        if leave_req.status != LeaveStatus.pending:
            raise InvalidTransitionError(leave_req.id, leave_req.status.value, action)

        result = await db.execute(
            update(LeaveRequest)
            .where(
                LeaveRequest.id == leave_req.id,
                LeaveRequest.status == LeaveStatus.pending,
            )
            .values(status=target, updated_at=now, **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.refresh(leave_req)
            logger.info(
                "Lost race on leave %s: now %s", leave_req.id, leave_req.status.value,
            )
            raise InvalidTransitionError(leave_req.id, leave_req.status.value, action)

        await create_audit_entry(
            db,
            action={
                LeaveStatus.approved: "approve",
                LeaveStatus.rejected: "reject",
                LeaveStatus.cancelled: "cancel",
            }[target],
            entity_type="leave_request",
            entity_id=leave_req.id,
            actor_id=actor_id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={
                "status": target.value,
                "remarks": values.get("approver_remarks"),
            },
        )
        await LeaveService._commit(db, f"marking leave {action}")
        await db.refresh(leave_req)

        logger.info("Leave %s %s by %s", leave_req.id, action, actor_id)
        return LeaveRequestOut.model_validate(leave_req)

    # ─────────────────────────────────────────────────────────────────
    # Approve / Reject Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        approver_id: uuid.UUID,
        *,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequestOut:
        """Approve a pending leave request (its days move from pending to used)."""

        now = now or datetime.now(timezone.utc)
        leave_req = await LeaveService._get_request(db, request_id)
        return await LeaveService._transition(
            db,
            leave_req,
            LeaveStatus.approved,
            actor_id=approver_id,
            now=now,
            values={
                "approver_id": approver_id,
                "approver_remarks": remarks,
                "decided_at": now,
            },
        )

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        approver_id: uuid.UUID,
        *,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequestOut:
        """Reject a pending leave request (its days stop counting)."""

        now = now or datetime.now(timezone.utc)
        leave_req = await LeaveService._get_request(db, request_id)
        return await LeaveService._transition(
            db,
            leave_req,
            LeaveStatus.rejected,
            actor_id=approver_id,
            now=now,
            values={
                "approver_id": approver_id,
                "approver_remarks": remarks,
                "decided_at": now,
            },
        )

    # ─────────────────────────────────────────────────────────────────
    # Cancel Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def cancel_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        requester_id: uuid.UUID,
        *,
        now: Optional[datetime] = None,
    ) -> LeaveRequestOut:
        """Cancel own pending leave request. Administrators reject instead."""

        now = now or datetime.now(timezone.utc)
        leave_req = await LeaveService._get_request(db, request_id)

        if leave_req.employee_id != requester_id:
            raise ForbiddenException("You can only cancel your own leave requests.")

        return await LeaveService._transition(
            db,
            leave_req,
            LeaveStatus.cancelled,
            actor_id=requester_id,
            now=now,
            values={"cancelled_at": now},
        )

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveRequestOut:
        leave_req = await LeaveService._get_request(db, request_id)
        return LeaveRequestOut.model_validate(leave_req)

    @staticmethod
    async def list_leaves(
        db: AsyncSession,
        filters: LeaveRequestFilters,
        *,
        sort: Optional[str] = "-created_at",
        limit: Optional[int] = None,
    ) -> list[LeaveRequestOut]:
        """List leave requests. ``start_date``/``end_date`` keep requests
        overlapping that window; either bound may be omitted."""

        query = select(LeaveRequest)
        query = apply_filters(
            query,
            LeaveRequest,
            {
                "employee_id": filters.employee_id,
                "status": filters.status,
                "end_date__from": filters.start_date,
                "start_date__to": filters.end_date,
            },
        )
        query = apply_sorting(query, LeaveRequest, sort)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return [LeaveRequestOut.model_validate(r) for r in result.scalars().all()]
