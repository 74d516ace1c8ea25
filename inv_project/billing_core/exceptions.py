from enum import Enum

from django.core.exceptions import ObjectDoesNotExist, ValidationError


class ErrorKind(str, Enum):
    """Closed set of failure kinds callers can branch on."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE_FAILURE = "storage_failure"
    CONFLICT = "conflict"


class BillingError(Exception):
    """Base for every error raised by billing_core services."""
    kind = None


class LedgerValidationError(BillingError, ValidationError):
    """Raised before any write when user input is rejected
    (missing field, bad amount, over-payment)."""
    kind = ErrorKind.VALIDATION


class RecordNotFound(BillingError, ObjectDoesNotExist):
    """Raised when an invoice / company / payment lookup finds nothing."""
    kind = ErrorKind.NOT_FOUND


class StorageFailure(BillingError):
    """Raised when the database fails mid-transition (the transition is rolled back)."""
    kind = ErrorKind.STORAGE_FAILURE


class LedgerConflict(BillingError):
    """Raised when a request conflicts with stored state
    (paid invoice edit, reused idempotency key, exhausted invoice numbers)."""
    kind = ErrorKind.CONFLICT
