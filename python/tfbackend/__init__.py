"""
tfbackend - HTTP remote state backend with advisory locking.
"""

from .config import BackendConfig
from .errors import (
    BackendError,
    DecodeError,
    LockConflictError,
    MethodNotAllowedError,
    NotFoundError,
    PathTraversalError,
    StorageError,
    UnlockMismatchError,
)
from .locks import LockInfo, LockManager
from .objects import ObjectStore
from .paths import PathResolver, ResolvedPath

__version__ = "0.1.0"

__all__ = [
    "BackendConfig",
    "BackendError",
    "DecodeError",
    "LockConflictError",
    "LockInfo",
    "LockManager",
    "MethodNotAllowedError",
    "NotFoundError",
    "ObjectStore",
    "PathResolver",
    "PathTraversalError",
    "ResolvedPath",
    "StorageError",
    "UnlockMismatchError",
]
