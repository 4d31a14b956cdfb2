"""Employee directory Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field

from breakbook.common.constants import AccrualPolicyType, EmploymentStatus
from breakbook.common.schemas import CamelModel, Days


# ═════════════════════════════════════════════════════════════════════
# Employee — write schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeCreate(CamelModel):
    """Payload for creating a new employee."""

    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    department: Optional[str] = Field(None, max_length=100)
    joining_date: date
    status: EmploymentStatus = EmploymentStatus.active
    accrual_policy: Optional[AccrualPolicyType] = None
    leave_quota: Optional[Decimal] = Field(None, ge=0, le=366)


class EmployeeUpdate(CamelModel):
    """Partial-update payload for an employee (all fields optional).

    ``joining_date`` is accepted only if it equals the stored value.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(None, max_length=100)
    joining_date: Optional[date] = None
    status: Optional[EmploymentStatus] = None


class LeaveQuotaUpdate(CamelModel):
    """Administrative override of an employee's accrual policy / quota.

    Sending ``null`` resets a field to the deployment default.
    """

    accrual_policy: Optional[AccrualPolicyType] = None
    leave_quota: Optional[Decimal] = Field(None, ge=0, le=366)


# ═════════════════════════════════════════════════════════════════════
# Employee — read schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeOut(CamelModel):
    """Full employee record."""

    id: uuid.UUID
    name: str
    email: str
    department: Optional[str] = None
    joining_date: date
    status: EmploymentStatus
    accrual_policy: Optional[AccrualPolicyType] = None
    leave_quota: Optional[Days] = None
    created_at: datetime
    updated_at: datetime
