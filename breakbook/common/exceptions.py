"""Custom exceptions and RFC 7807 Problem Detail error handlers.

Every business-rule violation raised by the leave engine is an
``AppException`` subclass carrying a stable machine-readable ``error_type``
(the *kind*) and a human-readable ``detail`` with the relevant numbers
interpolated.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

BASE_ERROR_URI = "https://breakbook.app/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class ConflictError(AppException):
    """409 — unique-constraint / duplicate."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ForbiddenException(AppException):
    """403 — insufficient permissions."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class ValidationException(AppException):
    """422 — business-logic validation failures."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


class InternalError(AppException):
    """500 — unexpected store / infrastructure failure."""

    def __init__(self, detail: str = "An unexpected error occurred.") -> None:
        super().__init__(
            status_code=500,
            error_type="internal",
            title="Internal Server Error",
            detail=detail,
        )


# ── Leave rule violations ───────────────────────────────────────────

class InactiveEmployeeError(AppException):
    """422 — leave requested by an inactive employee."""

    def __init__(self, employee_id: Any) -> None:
        super().__init__(
            status_code=422,
            error_type="inactive-employee",
            title="Inactive Employee",
            detail=f"Employee '{employee_id}' is inactive and cannot apply for leave.",
        )


class InvalidDateRangeError(AppException):
    """422 — start date after end date."""

    def __init__(self, start_date: date, end_date: date) -> None:
        super().__init__(
            status_code=422,
            error_type="invalid-date-range",
            title="Invalid Date Range",
            detail=(
                f"End date {end_date.isoformat()} cannot be before "
                f"start date {start_date.isoformat()}."
            ),
        )


class PreEmploymentLeaveError(AppException):
    """422 — leave starting before the employee joined."""

    def __init__(self, start_date: date, joining_date: date) -> None:
        super().__init__(
            status_code=422,
            error_type="pre-employment-leave",
            title="Leave Before Joining Date",
            detail=(
                f"Cannot apply for leave starting {start_date.isoformat()}, "
                f"before the joining date {joining_date.isoformat()}."
            ),
        )


class ZeroWorkingDaysError(AppException):
    """422 — the range contains only weekends/holidays."""

    def __init__(self, start_date: date, end_date: date) -> None:
        super().__init__(
            status_code=422,
            error_type="zero-working-days",
            title="No Working Days",
            detail=(
                f"The range {start_date.isoformat()} to {end_date.isoformat()} "
                "contains no working days (all days are weekends or holidays)."
            ),
        )


class InsufficientBalanceError(AppException):
    """422 — requested days exceed the available balance."""

    def __init__(self, requested: int, available: Decimal) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            status_code=422,
            error_type="insufficient-balance",
            title="Insufficient Leave Balance",
            detail=(
                f"Requested days ({requested}) exceed available balance "
                f"({_format_days(available)})."
            ),
        )


class OverlappingRequestError(AppException):
    """409 — an active request already covers some of these dates."""

    def __init__(self, existing_id: Any, start_date: date, end_date: date) -> None:
        super().__init__(
            status_code=409,
            error_type="overlapping-request",
            title="Overlapping Leave Request",
            detail=(
                f"Leave request '{existing_id}' ({start_date.isoformat()} to "
                f"{end_date.isoformat()}) already overlaps these dates."
            ),
        )


class InvalidTransitionError(AppException):
    """409 — the request is not in a state that allows this transition."""

    def __init__(self, request_id: Any, current: str, action: str) -> None:
        super().__init__(
            status_code=409,
            error_type="invalid-transition",
            title="Invalid Status Transition",
            detail=(
                f"Leave request '{request_id}' is {current}; "
                f"only pending requests can be {action}."
            ),
        )


def _format_days(value: Decimal) -> str:
    """Render ``Decimal('2.00')`` as ``2`` and ``Decimal('2.50')`` as ``2.5``."""
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "kind": exc.error_type,
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info(
            "%s %s rejected (%s): %s",
            request.method, request.url.path, exc.error_type, exc.detail,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "kind": "validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


async def _handle_unexpected_error(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await _handle_app_exception(request, InternalError())


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected_error)
