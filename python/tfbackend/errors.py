"""
Backend errors.

Every error maps to exactly one HTTP status code. The API server installs a
single exception handler that turns these into responses, so storage and lock
code can simply raise.
"""

from typing import Optional


class BackendError(Exception):
    """Base class for all errors surfaced to HTTP clients."""

    status_code: int = 500
    media_type: str = "text/plain; charset=utf-8"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    @property
    def body(self) -> bytes:
        return (self.message or self.__class__.__name__).encode("utf-8")


class NotFoundError(BackendError):
    """Object or lock is absent."""

    status_code = 404

    def __init__(self, path: str = ""):
        super().__init__(f"Not found: {path}" if path else "Not Found")
        self.path = path

    @property
    def body(self) -> bytes:
        return b"Not Found"


class MethodNotAllowedError(BackendError):
    """Verb has no operation under this route prefix."""

    status_code = 405

    def __init__(self, method: str):
        super().__init__(f"Method not allowed: {method}")
        self.method = method

    @property
    def body(self) -> bytes:
        return b"Method not allowed"


class DecodeError(BackendError):
    """Request body is not a valid lock record."""

    status_code = 500


class PathTraversalError(BackendError):
    """Resolved path falls outside the storage root."""

    status_code = 400


class StorageError(BackendError):
    """Underlying filesystem failure."""

    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class _LockRecordError(BackendError):
    """Error whose body is the stored lock record, not a message."""

    media_type = "application/json"

    def __init__(self, message: str, existing: bytes):
        super().__init__(message)
        self.existing = existing

    @property
    def body(self) -> bytes:
        return self.existing


class LockConflictError(_LockRecordError):
    """Acquire on a path that is already locked."""

    status_code = 423


class UnlockMismatchError(_LockRecordError):
    """Release with an ID that does not match the holder."""

    status_code = 409
