"""
Error taxonomy for the booking core.

Workflow steps raise BookingServiceError subclasses; the operation boundary
(see services.results) turns them into OperationResult errors, so callers
never see these exceptions for domain failures. StoreError is raised by the
Resource Store whenever the backend rejects or cannot run a statement.
"""

import enum
from typing import Any, Optional


class ErrorCode(str, enum.Enum):
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    EXCEEDS_CAPACITY = "EXCEEDS_CAPACITY"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    SOLD_OUT = "SOLD_OUT"
    NOT_AVAILABLE = "NOT_AVAILABLE"
    AVAILABILITY_CHECK_FAILED = "AVAILABILITY_CHECK_FAILED"
    BOOKING_FAILED = "BOOKING_FAILED"
    CAPACITY_UPDATE_FAILED = "CAPACITY_UPDATE_FAILED"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    CANNOT_CANCEL = "CANNOT_CANCEL"
    CANCELLATION_FAILED = "CANCELLATION_FAILED"
    CANNOT_MODIFY = "CANNOT_MODIFY"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    UPDATE_FAILED = "UPDATE_FAILED"
    FETCH_FAILED = "FETCH_FAILED"
    ALREADY_SAVED = "ALREADY_SAVED"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    SAVE_FAILED = "SAVE_FAILED"
    REMOVE_FAILED = "REMOVE_FAILED"


class StoreError(Exception):
    """The Resource Store failed to execute a read or write."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}" if cause else f"{operation} failed")


class BookingServiceError(Exception):
    code: ErrorCode = ErrorCode.BOOKING_FAILED
    default_message = "Booking operation failed"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(code={self.code.value}, message={self.message!r})>"


# Validation

class ExceedsCapacity(BookingServiceError):
    code = ErrorCode.EXCEEDS_CAPACITY
    default_message = "Requested quantity exceeds the maximum capacity"


class InvalidDateRange(BookingServiceError):
    code = ErrorCode.INVALID_DATE_RANGE
    default_message = "End date must be after start date"


class CannotModify(BookingServiceError):
    code = ErrorCode.CANNOT_MODIFY
    default_message = "Booking cannot be modified"


class InvalidStatusTransition(BookingServiceError):
    code = ErrorCode.INVALID_STATUS_TRANSITION
    default_message = "Status transition is not allowed"


# Lookups

class ResourceNotFound(BookingServiceError):
    code = ErrorCode.RESOURCE_NOT_FOUND
    default_message = "Resource not found"


class BookingNotFound(BookingServiceError):
    code = ErrorCode.BOOKING_NOT_FOUND
    default_message = "Booking not found or you do not have permission to access it"


class ItemNotFound(BookingServiceError):
    code = ErrorCode.ITEM_NOT_FOUND
    default_message = "Item not found"


class FetchFailed(BookingServiceError):
    code = ErrorCode.FETCH_FAILED
    default_message = "Failed to fetch data"


# Availability

class InsufficientCapacity(BookingServiceError):
    code = ErrorCode.INSUFFICIENT_CAPACITY
    default_message = "Not enough capacity left"


class SoldOut(BookingServiceError):
    code = ErrorCode.SOLD_OUT
    default_message = "Sold out"


class NotAvailable(BookingServiceError):
    code = ErrorCode.NOT_AVAILABLE
    default_message = "Not available for the selected dates"


class AvailabilityCheckFailed(BookingServiceError, LookupError):
    code = ErrorCode.AVAILABILITY_CHECK_FAILED
    default_message = "Failed to check availability"


# Write failures

class BookingFailed(BookingServiceError):
    code = ErrorCode.BOOKING_FAILED
    default_message = "Failed to create booking"


class CapacityUpdateFailed(BookingServiceError):
    code = ErrorCode.CAPACITY_UPDATE_FAILED
    default_message = "Failed to update capacity"


class CannotCancel(BookingServiceError):
    code = ErrorCode.CANNOT_CANCEL
    default_message = "Booking cannot be cancelled"


class CancellationFailed(BookingServiceError):
    code = ErrorCode.CANCELLATION_FAILED
    default_message = "Failed to cancel booking"


class UpdateFailed(BookingServiceError):
    code = ErrorCode.UPDATE_FAILED
    default_message = "Failed to update booking"


# Saved items

class AlreadySaved(BookingServiceError):
    code = ErrorCode.ALREADY_SAVED
    default_message = "Item is already saved"


class SaveFailed(BookingServiceError):
    code = ErrorCode.SAVE_FAILED
    default_message = "Failed to save item"


class RemoveFailed(BookingServiceError):
    code = ErrorCode.REMOVE_FAILED
    default_message = "Failed to remove saved item"


class IntegrityViolation(StoreError):
    """A write was rejected by a database constraint."""
