"""
Booking error taxonomy.

All of these are local, recoverable conditions returned to the caller.
Storage and network failures are not wrapped here and propagate as-is.
"""
from typing import Any, Dict, Optional


class BookingError(Exception):
    """Base class for user-correctable booking errors"""

    code = "booking_error"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationMissing(BookingError):
    """No working hours resolvable for the requested date"""

    code = "configuration_missing"
    status_code = 422


class PastTimeError(BookingError):
    """Requested slot already elapsed"""

    code = "past_time"
    status_code = 422


class ConflictError(BookingError):
    """Slot was taken between listing and booking; client must re-fetch availability"""

    code = "slot_unavailable"
    status_code = 409


class ValidationError(BookingError):
    """Malformed input, rejected before any storage access"""

    code = "validation_error"
    status_code = 422


class PlanLimitError(BookingError):
    """Business reached the monthly booking limit of its plan"""

    code = "plan_limit_reached"
    status_code = 403


class NotFoundError(BookingError):
    code = "not_found"
    status_code = 404
