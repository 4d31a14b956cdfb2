"""Enums and constants for BreakBook — matching the database ENUM types."""

from __future__ import annotations

import enum


# ── Employee directory ──────────────────────────────────────────────

class EmploymentStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class AccrualPolicyType(str, enum.Enum):
    flat = "flat"
    prorated = "prorated"


# Requests in these states block overlapping dates and consume balance
ACTIVE_LEAVE_STATUSES: tuple[LeaveStatus, ...] = (
    LeaveStatus.pending,
    LeaveStatus.approved,
)

# ── Misc constants ──────────────────────────────────────────────────

SATURDAY = 5
SUNDAY = 6
MAX_PAGE_SIZE = 200
