"""Error taxonomy shared by services, repositories and the HTTP layer.

Every error carries a stable ``kind`` string that clients can switch on, the
HTTP status it maps to, and whether retrying the same request may succeed.
"""

from __future__ import annotations


class RejectionError(Exception):
    """Base class for all domain errors."""

    kind: str = "error"
    status_code: int = 500
    retryable: bool = False
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(RejectionError):
    kind = "unauthorized"
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(RejectionError):
    kind = "forbidden"
    status_code = 403
    default_message = "Forbidden"


class NotFound(RejectionError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class InvalidAction(RejectionError):
    kind = "invalid_action"
    status_code = 400
    default_message = "Invalid action"


class InvalidInput(RejectionError):
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid request data"


class ConflictDuplicate(RejectionError):
    """A uniqueness constraint in the datastore rejected a write."""

    kind = "conflict_duplicate"
    status_code = 409
    default_message = "Duplicate record"


class WinnerAlreadySelected(RejectionError):
    kind = "winner_already_selected"
    status_code = 409
    default_message = "A different winner has already been selected for this challenge"


class DailyLimitExceeded(RejectionError):
    kind = "daily_limit_exceeded"
    status_code = 429
    default_message = "Daily submission limit reached"


class TransientStoreError(RejectionError):
    """Timeout or connection failure talking to the datastore. Nothing was applied."""

    kind = "transient_store_error"
    status_code = 503
    retryable = True
    default_message = "Datastore temporarily unavailable, please retry"


class PersistFailure(RejectionError):
    """The datastore rejected a write for a non-transient reason."""

    kind = "persist_failure"
    status_code = 500
    default_message = "Failed to persist changes"
