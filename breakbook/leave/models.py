"""Leave ORM model: LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from breakbook.common.constants import ACTIVE_LEAVE_STATUSES, LeaveStatus
from breakbook.database import Base

if TYPE_CHECKING:
    from breakbook.employees.models import Employee


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_date_order"),
        sa.CheckConstraint("days_requested >= 1", name="ck_leave_days_positive"),
        sa.Index("ix_leave_requests_employee_status", "employee_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    # Frozen at creation; never recomputed if the holiday calendar changes
    days_requested: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
        server_default=LeaveStatus.pending.name,
    )
    approver_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    approver_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    decided_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=_utcnow,
        server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=_utcnow,
        server_default=sa.func.now(),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="leave_requests")

    @property
    def is_active(self) -> bool:
        """PENDING and APPROVED requests hold their dates and consume balance."""
        return self.status in ACTIVE_LEAVE_STATUSES

    def __repr__(self) -> str:
        return (
            f"<LeaveRequest {self.id} {self.start_date}..{self.end_date} "
            f"{self.status.value}>"
        )
