"""Employee directory ORM model.

The leave engine reads only ``joining_date``, ``status`` and the accrual
fields; everything else is directory bookkeeping.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from breakbook.common.constants import AccrualPolicyType, EmploymentStatus
from breakbook.database import Base

if TYPE_CHECKING:
    from breakbook.leave.models import LeaveRequest


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    """Employee record — owner of leave requests."""

    __tablename__ = "employees"

    # ── Primary key ─────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Identity ────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    email: Mapped[str] = mapped_column(
        sa.String(255), unique=True, nullable=False,
    )
    department: Mapped[Optional[str]] = mapped_column(sa.String(100))

    # ── Employment ──────────────────────────────────────────────────
    joining_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[EmploymentStatus] = mapped_column(
        sa.Enum(EmploymentStatus, name="employment_status"),
        nullable=False,
        default=EmploymentStatus.active,
    )

    # ── Leave quota (NULL → deployment default) ─────────────────────
    accrual_policy: Mapped[Optional[AccrualPolicyType]] = mapped_column(
        sa.Enum(AccrualPolicyType, name="accrual_policy_type"),
    )
    leave_quota: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(6, 2))

    # ── Timestamps ──────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=_utcnow,
        server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=_utcnow,
        server_default=sa.func.now(),
        onupdate=_utcnow,
    )

    # ── Relationships ───────────────────────────────────────────────
    leave_requests: Mapped[list[LeaveRequest]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Employee {self.email!r} ({self.status.value})>"
