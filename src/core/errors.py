"""Exception hierarchy for calendar-to-ledger synchronization."""


class TimeSyncError(Exception):
    """Base class for all sync errors."""


class ConfigurationError(TimeSyncError):
    """A required setting or ledger identifier is missing. Fatal, raised pre-flight."""


class RemoteError(TimeSyncError):
    """The calendar or ledger was unreachable or returned malformed data."""

    def __init__(self, message: str, status: int | None = None, details: object = None):
        super().__init__(message)
        self.status = status
        self.details = details


class ValidationError(RemoteError):
    """The ledger rejected an entry (malformed fields or unknown project/task)."""


class NotFoundError(RemoteError):
    """The ledger record no longer exists."""


class AuthenticationError(RemoteError):
    """Login failed or the request was made without a valid token."""
