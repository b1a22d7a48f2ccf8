"""Custom exceptions for file-semaphore.

Infrastructure failures (an unusable root directory, a lease write that
fails after the caller was eligible to acquire) are raised. Business-state
outcomes (a key held by someone else, releasing an absent key) are not
errors and are reported through boolean return values instead.
"""


class FileSemaphoreError(Exception):
    """Base exception for all file-semaphore errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(FileSemaphoreError):
    """Exception raised for invalid lock store settings.

    Examples:
        - Missing FILE_SEMAPHORE_ROOT
        - Unknown guard mode
        - Guard mode unsupported on this platform
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class ProvisioningError(FileSemaphoreError):
    """Exception raised when the root directory cannot be used for lease records.

    Examples:
        - Path exists but is a regular file
        - Directory exists but is not writable
        - Directory could not be created
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.path = path
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"path '{self.path}'")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class AcquisitionError(FileSemaphoreError):
    """Exception raised when writing a lease record fails.

    This is not raised when the key is simply held by another caller;
    that case is reported as ``False`` from ``acquire``.

    Attributes:
        key: Key whose lease record could not be written
        original_error: Underlying filesystem error, if any
    """

    def __init__(self, key: str, details: str | None = None, original_error: Exception | None = None):
        self.key = key
        self.original_error = original_error
        super().__init__(f'Failed to acquire key "{key}"', details)


class InvalidKeyError(FileSemaphoreError, ValueError):
    """Raised when a key cannot be used as a single path segment."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid lock key {key!r}", reason)
