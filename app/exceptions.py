"""Exception hierarchy for the property service.

Each error carries the HTTP status and a short machine code so the API layer
can render it without knowing the individual classes.
"""

from __future__ import annotations


class PropertyServiceError(Exception):
    """Base exception for all property service errors."""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"


class NotFound(PropertyServiceError):
    """Raised when a requested local identifier does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class Unauthorized(PropertyServiceError):
    """Raised when the caller's ledger address does not own the resource."""

    status_code = 403
    code = "FORBIDDEN"


class PreconditionFailed(PropertyServiceError):
    """Raised when the resource is not in a state that allows the operation."""

    status_code = 409
    code = "PRECONDITION_FAILED"


class ConcurrentUpdate(PropertyServiceError):
    """Raised when a property row changed underneath the current request."""

    status_code = 409
    code = "CONCURRENT_UPDATE"


class ValidationFailure(PropertyServiceError):
    """Raised for malformed input that slipped past schema validation."""

    status_code = 400
    code = "VALIDATION_ERROR"


class _RemoteFailure(PropertyServiceError):
    """Failure of a remote collaborator; keeps the original transport error."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class LedgerSyncFailure(_RemoteFailure):
    """Raised when a ledger call fails or returns no confirming event."""

    status_code = 502
    code = "LEDGER_SYNC_FAILURE"


class LedgerTimeout(_RemoteFailure):
    """Raised when a ledger call exceeds its deadline. The outcome is unknown."""

    status_code = 504
    code = "LEDGER_TIMEOUT"


class StorageFailure(_RemoteFailure):
    """Raised when the blob store rejects or fails a request."""

    status_code = 502
    code = "STORAGE_FAILURE"


class StorageTimeout(StorageFailure):
    """Raised when a blob store call exceeds its deadline."""

    status_code = 504
    code = "STORAGE_TIMEOUT"
