# services/booking-service/src/apps/core/services/exceptions.py
"""
Booking Service Exceptions

Domain errors raised by the service layer. Each carries the HTTP
status the API layer answers with.
"""

import functools
import logging
from typing import Optional, Dict, Any, List

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class BookingServiceError(Exception):
    """Base exception for booking service errors."""

    http_status = 500

    def __init__(
        self,
        message: str,
        code: str = "BOOKING_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(BookingServiceError):
    """
    Raised when request fields are missing or malformed.

    `details` maps field names to lists of messages.
    """

    http_status = 400

    def __init__(
        self,
        message: str = "Validation error",
        field: str = None,
        errors: Optional[Dict[str, List[str]]] = None
    ):
        field_errors = dict(errors or {})
        if field:
            field_errors.setdefault(field, []).append(message)
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=field_errors
        )

    @property
    def field_errors(self) -> Dict[str, List[str]]:
        return self.details


class UnknownServiceError(BookingServiceError):
    """Raised when a requested service code is not in the catalog."""

    http_status = 400

    def __init__(self, codes: List[str]):
        self.codes = list(codes)
        super().__init__(
            message=f"Unknown service code(s): {', '.join(self.codes)}",
            code="UNKNOWN_SERVICE",
            details={"services": self.codes}
        )


class InactiveServiceError(BookingServiceError):
    """Raised when a requested service has been retired."""

    http_status = 400

    def __init__(self, codes: List[str]):
        self.codes = list(codes)
        super().__init__(
            message=f"Service(s) no longer offered: {', '.join(self.codes)}",
            code="INACTIVE_SERVICE",
            details={"services": self.codes}
        )


class SlotUnavailableError(BookingServiceError):
    """Raised when the requested time cannot hold the booking."""

    http_status = 409

    REASON_CLOSED = "closed"
    REASON_OCCUPIED = "occupied"
    REASON_AFTER_CLOSE = "after_close"

    def __init__(
        self,
        date,
        time,
        reason: str = REASON_OCCUPIED,
        conflicting_booking: str = None,
        message: str = None
    ):
        self.reason = reason
        self.conflicting_booking = conflicting_booking
        details = {
            "date": str(date),
            "time": time.strftime('%H:%M') if hasattr(time, 'strftime') else str(time),
            "reason": reason,
        }
        if conflicting_booking:
            details["conflicting_booking"] = conflicting_booking
        super().__init__(
            message=message or f"Requested slot {details['date']} {details['time']} is not available",
            code="SLOT_UNAVAILABLE",
            details=details
        )


class InvalidTransitionError(BookingServiceError):
    """Raised when a status change is not allowed from the current state."""

    http_status = 409

    def __init__(self, booking_code: str, current_status: str, target_status: str):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            message=f"Cannot transition from {current_status} to {target_status}",
            code="INVALID_TRANSITION",
            details={
                "booking_code": booking_code,
                "current_status": current_status,
                "target_status": target_status,
            }
        )


class NotFoundError(BookingServiceError):
    """Raised when a booking code or record does not exist."""

    http_status = 404

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            code="NOT_FOUND",
            details={"resource": resource, "id": str(identifier)}
        )


class StorageError(BookingServiceError):
    """Raised when persistence is unavailable."""

    http_status = 503

    def __init__(self, message: str = "Storage is temporarily unavailable", operation: str = None):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            details={"operation": operation} if operation else {}
        )


def translate_database_errors(operation: str):
    """
    Decorator turning unexpected database failures into StorageError.

    Domain errors raised inside the wrapped call pass through untouched.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DatabaseError as e:
                logger.error(f"Storage failure during {operation}: {e}")
                raise StorageError(operation=operation) from e
        return wrapper
    return decorator
