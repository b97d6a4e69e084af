"""
Exception hierarchy for Rancher Scriba.

Components raise these; only the command-line driver turns them into a
process exit status.
"""

from typing import Optional


class ScribaError(Exception):
    """Base class for all collector failures."""


class ConfigurationError(ScribaError):
    """Required settings are missing or invalid."""


class FetchError(ScribaError):
    """
    A single failed attempt to read from the Rancher API.

    Covers transport errors, non-success status codes and undecodable
    payloads. Every FetchError is treated as transient by the retrier.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RetriesExhaustedError(ScribaError):
    """All attempts of a retried operation failed."""

    def __init__(self, operation: str, attempts: int, last_error: Optional[BaseException] = None):
        message = f"{operation} failed after {attempts} attempts"
        if last_error is not None:
            message += f": {last_error}"
        super().__init__(message)
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


class StoreError(ScribaError):
    """The backing document store rejected or failed a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentNotFoundError(StoreError):
    """The named document does not exist yet."""


class StoreConflictError(StoreError):
    """The document changed between read and write."""
