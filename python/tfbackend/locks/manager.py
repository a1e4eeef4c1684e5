"""Lock manager enforcing at most one lock per resource path.

Design principles:
- The lock file is the lock. Its presence means Locked, its absence Unlocked;
  nothing is tracked in process memory, so several processes may share one
  storage root.
- Acquisition is a single atomic create-only-if-absent step. The record is
  written and fsynced to a private temporary file first and then published
  with os.link, which fails with EEXIST when a lock file is already present.
  A visible lock file is therefore always complete.
- Locks never expire. Release with the matching ID is the only way to clear one.
"""

from __future__ import annotations

import logging
import os
import uuid
from contextlib import suppress
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ..errors import (
    DecodeError,
    LockConflictError,
    NotFoundError,
    StorageError,
    UnlockMismatchError,
)
from ..paths import PathResolver, ResolvedPath
from .models import LockInfo

logger = logging.getLogger(__name__)

LOCK_FILE_MODE = 0o644


class LockManager:
    """Filesystem-backed lock manager keyed by resource path."""

    acquire_attempts = 3

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path)
        self.resolver = PathResolver(self.base_path)

    def resolve(self, path: str) -> ResolvedPath:
        return self.resolver.resolve(path)

    @staticmethod
    def decode(body: bytes) -> LockInfo:
        """Decode a request body into a lock record."""
        try:
            return LockInfo.from_json(body)
        except ValidationError as e:
            raise DecodeError(f"Error decoding lock info: {e}") from e

    def acquire(self, path: str, lock_info: LockInfo) -> LockInfo:
        """Take the lock on `path` or raise LockConflictError with the holder's record."""
        resolved = self.resolve(path)
        try:
            resolved.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("Error creating lock directory", e) from e

        tmp_path = self._write_candidate(resolved, lock_info.to_json())
        try:
            for _ in range(self.acquire_attempts):
                try:
                    os.link(tmp_path, resolved.file_path)
                except FileExistsError:
                    existing = self._read_bytes(resolved)
                    if existing is None:
                        # Released between the failed link and the read.
                        continue
                    logger.info("Lock already held for %s", resolved)
                    raise LockConflictError(f"Lock already held for {path}", existing)
                except OSError as e:
                    raise StorageError("Error writing lock file", e) from e

                logger.info("Lock acquired for %s by %s", resolved, lock_info.who)
                return lock_info
        finally:
            with suppress(OSError):
                os.unlink(tmp_path)

        raise StorageError(f"Lock for {path} changed repeatedly during acquisition")

    def release(self, path: str, lock_info: LockInfo) -> LockInfo:
        """Remove the lock on `path` if `lock_info.id` matches the holder.

        Returns the released record. Raises NotFoundError when unlocked and
        UnlockMismatchError (carrying the holder's record) on an ID mismatch.
        """
        resolved = self.resolve(path)
        existing_data = self._read_bytes(resolved)
        if existing_data is None:
            raise NotFoundError(path)
        existing = self._parse(existing_data)

        if lock_info.id != existing.id:
            logger.info(
                "Unlock refused for %s: held by %s with a different ID",
                resolved,
                existing.who,
            )
            raise UnlockMismatchError(f"Lock ID mismatch for {path}", existing_data)

        try:
            resolved.file_path.unlink()
        except FileNotFoundError:
            raise NotFoundError(path)
        except OSError as e:
            raise StorageError("Error removing lock file", e) from e

        logger.info("Lock released for %s by %s", resolved, lock_info.who)
        return existing

    def get(self, path: str) -> Optional[LockInfo]:
        """Current lock record for `path`, or None when unlocked."""
        data = self.read_raw(path)
        if data is None:
            return None
        return self._parse(data)

    def read_raw(self, path: str) -> Optional[bytes]:
        """Stored lock record bytes for `path`, or None when unlocked."""
        return self._read_bytes(self.resolve(path))

    def is_locked(self, path: str) -> bool:
        return self.read_raw(path) is not None

    @staticmethod
    def _write_candidate(resolved: ResolvedPath, payload: bytes) -> Path:
        tmp_path = resolved.directory / f".{resolved.file_path.name}.{uuid.uuid4().hex}.tmp"
        try:
            fd = os.open(str(tmp_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, LOCK_FILE_MODE)
        except OSError as e:
            raise StorageError("Error creating lock file", e) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise StorageError("Error writing lock file", e) from e
        return tmp_path

    @staticmethod
    def _read_bytes(resolved: ResolvedPath) -> Optional[bytes]:
        try:
            return resolved.file_path.read_bytes()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise StorageError("Error reading lock file", e) from e

    @staticmethod
    def _parse(data: bytes) -> LockInfo:
        try:
            return LockInfo.from_json(data)
        except ValidationError as e:
            raise StorageError("Error unmarshaling lock data", e) from e
