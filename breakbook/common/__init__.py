"""Common module — shared utilities for BreakBook."""

from breakbook.common.constants import (
    ACTIVE_LEAVE_STATUSES,
    AccrualPolicyType,
    EmploymentStatus,
    LeaveStatus,
)
from breakbook.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    InactiveEmployeeError,
    InsufficientBalanceError,
    InternalError,
    InvalidDateRangeError,
    InvalidTransitionError,
    NotFoundException,
    OverlappingRequestError,
    PreEmploymentLeaveError,
    ValidationException,
    ZeroWorkingDaysError,
    register_exception_handlers,
)
from breakbook.common.filters import apply_filters, apply_sorting

__all__ = [
    # Constants / Enums
    "ACTIVE_LEAVE_STATUSES",
    "AccrualPolicyType",
    "EmploymentStatus",
    "LeaveStatus",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "InactiveEmployeeError",
    "InsufficientBalanceError",
    "InternalError",
    "InvalidDateRangeError",
    "InvalidTransitionError",
    "NotFoundException",
    "OverlappingRequestError",
    "PreEmploymentLeaveError",
    "ValidationException",
    "ZeroWorkingDaysError",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_sorting",
]
