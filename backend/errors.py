class SyncError(Exception):
    """Base class for every failure the sync engine reports."""

    def __init__(self, message: str, platform: str | None = None):
        super().__init__(message)
        self.message = message
        self.platform = platform

    def __str__(self) -> str:
        if self.platform:
            return f"{self.platform}: {self.message}"
        return self.message


class NotFound(SyncError):
    """The handle does not exist on the platform (or no handle is configured)."""


class RateLimited(SyncError):
    """The platform kept answering 403/429; surfaces as the cause of an Unavailable."""


class Unavailable(SyncError):
    """Transport failure, timeout, exhausted retries or nothing extractable."""


class ValidationError(SyncError):
    """Malformed input: a bad activity record or an invalid handle batch."""


class SyncInProgress(SyncError):
    """Another sync already holds the (user, platform) flag."""
