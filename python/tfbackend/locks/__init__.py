"""Locking subsystem for resource paths.

Lock records live as JSON files under the storage root; LockManager is the
only code that reads or writes them.
"""

from .manager import LockManager
from .models import LockInfo

__all__ = [
    "LockInfo",
    "LockManager",
]
