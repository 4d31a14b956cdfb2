"""Leave balance engine — accrual policies and balance computation.

Accrual is modelled as a tagged variant resolved per employee:

  - ``FlatAllocation(days)``              — a fixed yearly grant
  - ``ProratedAccrual(annual_quota, …)``  — ``annual_quota / 12`` per whole
    month elapsed since the joining date

Consumption is read from the store with one aggregate ``SUM`` per status;
nothing is cached, so two calls without an intervening write agree.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from breakbook.common.constants import AccrualPolicyType, LeaveStatus
from breakbook.config import settings
from breakbook.employees.models import Employee
from breakbook.leave.calendar import months_elapsed
from breakbook.leave.models import LeaveRequest
from breakbook.leave.schemas import LeaveBalanceOut

ZERO = Decimal("0")
CENT = Decimal("0.01")


# ═════════════════════════════════════════════════════════════════════
# Accrual policies
# ═════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FlatAllocation:
    days: Decimal

    def accrued(self, joining_date: date, as_of: date) -> Decimal:
        return self.days


@dataclass(frozen=True)
class ProratedAccrual:
    annual_quota: Decimal
    whole_days: bool = False

    def accrued(self, joining_date: date, as_of: date) -> Decimal:
        months = months_elapsed(joining_date, as_of)
        amount = self.annual_quota * months / 12
        if self.whole_days:
            return amount.to_integral_value(rounding=ROUND_DOWN)
        # Two decimal places, like the Numeric(6, 2) quota column; rounding
        # down never credits a day fraction that has not been earned
        return amount.quantize(CENT, rounding=ROUND_DOWN)


AccrualPolicy = Union[FlatAllocation, ProratedAccrual]


def policy_for(employee: Employee) -> AccrualPolicy:
    """Resolve the accrual policy for *employee*.

    The employee's own ``accrual_policy`` / ``leave_quota`` win; missing
    values fall back to the deployment defaults in settings.
    """
    kind = employee.accrual_policy or AccrualPolicyType(settings.ACCRUAL_POLICY)

    if kind == AccrualPolicyType.prorated:
        quota = employee.leave_quota
        if quota is None:
            quota = Decimal(str(settings.ANNUAL_LEAVE_QUOTA))
        return ProratedAccrual(
            annual_quota=Decimal(quota),
            whole_days=settings.ACCRUAL_WHOLE_DAYS,
        )

    days = employee.leave_quota
    if days is None:
        days = Decimal(str(settings.DEFAULT_LEAVE_ALLOCATION))
    return FlatAllocation(days=Decimal(days))


# ═════════════════════════════════════════════════════════════════════
# BalanceCalculator
# ═════════════════════════════════════════════════════════════════════


class BalanceCalculator:
    """Stateless balance queries against the leave store."""

    @staticmethod
    def accrued(
        employee: Employee,
        as_of: date,
        policy: Optional[AccrualPolicy] = None,
    ) -> Decimal:
        """Days earned by *employee* as of *as_of* under *policy*
        (defaults to the employee's resolved policy)."""
        policy = policy or policy_for(employee)
        return policy.accrued(employee.joining_date, as_of)

    @staticmethod
    async def consumed(
        db: AsyncSession,
        employee_id: uuid.UUID,
        status: LeaveStatus,
    ) -> int:
        """Sum of ``days_requested`` over the employee's requests in *status*."""
        result = await db.execute(
            select(func.coalesce(func.sum(LeaveRequest.days_requested), 0)).where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status == status,
            )
        )
        return int(result.scalar_one())

    @staticmethod
    async def balance(
        db: AsyncSession,
        employee: Employee,
        as_of: date,
        policy: Optional[AccrualPolicy] = None,
    ) -> LeaveBalanceOut:
        """Current leave position.

        ``available`` is the only clamped figure; ``allocated - used - pending``
        may be negative after an administrative quota cut and that stays
        visible through ``used``/``pending``.
        """
        allocated = BalanceCalculator.accrued(employee, as_of, policy)
        used = await BalanceCalculator.consumed(db, employee.id, LeaveStatus.approved)
        pending = await BalanceCalculator.consumed(db, employee.id, LeaveStatus.pending)
        available = max(allocated - used - pending, ZERO)

        return LeaveBalanceOut(
            employee_id=employee.id,
            as_of=as_of,
            allocated=allocated,
            used=used,
            pending=pending,
            available=available,
        )
