# gh_importer/errors.py


class ImporterError(Exception):
    """Base class for importer errors."""


class ConfigurationError(ImporterError):
    """A required setting (e.g. the access token) is missing."""


class RetryableError(ImporterError):
    """GitHub asked us to slow down. Carries whatever timing hints came with it."""

    def __init__(self, message, retry_after=None, resets_at=None):
        super().__init__(message)
        self.retry_after = retry_after
        self.resets_at = resets_at


class RateLimitError(RetryableError):
    """Primary rate limit exhausted (429, or 403 with no remaining quota)."""


class AbuseDetectedError(RetryableError):
    """Secondary rate limit / abuse detection triggered."""
