"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out                → response bodies (read)
  - *Filters            → list query parameters

Date ordering is deliberately *not* validated here: the workflow reports
an unknown employee before a bad date range.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from breakbook.common.constants import LeaveStatus
from breakbook.common.schemas import CamelModel, Days


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(CamelModel):
    """Payload for applying for leave."""

    employee_id: uuid.UUID
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    reason: Optional[str] = Field(None, max_length=1000)


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(CamelModel):
    """Full leave request response."""

    id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    days_requested: int
    reason: Optional[str] = None
    status: LeaveStatus
    approver_id: Optional[uuid.UUID] = None
    approver_remarks: Optional[str] = None
    decided_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Leave Approve / Reject / Cancel
# ═════════════════════════════════════════════════════════════════════


class LeaveDecisionRequest(CamelModel):
    """Payload for approving or rejecting a leave request."""

    approver_id: uuid.UUID
    remarks: Optional[str] = Field(None, max_length=500)


class LeaveCancelRequest(CamelModel):
    """Payload for cancelling a leave request; only the owner may cancel."""

    employee_id: uuid.UUID


# ═════════════════════════════════════════════════════════════════════
# Leave Balance
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceOut(CamelModel):
    """Leave position of one employee at a reference date."""

    employee_id: uuid.UUID
    as_of: date
    allocated: Days
    used: int
    pending: int
    available: Days


# ═════════════════════════════════════════════════════════════════════
# Leave Request Filters
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestFilters(CamelModel):
    """Query filters for listing leave requests.

    ``start_date`` / ``end_date`` select requests overlapping that window.
    """

    employee_id: Optional[uuid.UUID] = None
    status: Optional[LeaveStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("status", mode="before")
    @classmethod
    def _lowercase_status(cls, value):
        return value.lower() if isinstance(value, str) else value
