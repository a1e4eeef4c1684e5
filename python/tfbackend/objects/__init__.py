"""
tfbackend Object System

State blobs are stored as plain files under the storage root.
"""

from .store import ObjectStore

__all__ = [
    "ObjectStore",
]
