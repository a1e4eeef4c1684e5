"""
ObjectStore - File-based storage for state blobs.

Each state object is stored as a single file under the store's base path,
at the location named by its resource path (e.g. "env/prod.tfstate" is kept
at <base_path>/env/prod.tfstate). Content is opaque bytes; the store never
parses it.
"""

import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Union

from ..errors import NotFoundError, StorageError
from ..paths import PathResolver, ResolvedPath

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


class ObjectStore:
    """
    File-based Object Store.

    No caching and no locking: every call goes straight to the filesystem,
    and serializing writers is left to callers holding a lock.

    Usage:
        store = ObjectStore("./data/states")

        # Create or replace an object
        store.write("env/prod.tfstate", b'{"version": 4}')

        # Read object
        data = store.read("env/prod.tfstate")

        # Delete object
        store.delete("env/prod.tfstate")
    """

    def __init__(self, base_path: Union[str, Path]):
        """
        Initialize ObjectStore.

        Args:
            base_path: Directory under which objects are stored. It does not
                need to exist yet; directories are created on write.
        """
        self.base_path = Path(base_path)
        self.resolver = PathResolver(self.base_path)

    def resolve(self, path: str) -> ResolvedPath:
        return self.resolver.resolve(path)

    def read(self, path: str) -> bytes:
        """
        Read an object.

        Args:
            path: Resource path of the object

        Returns:
            The exact bytes last written

        Raises:
            NotFoundError: No object exists at the path
            StorageError: The file exists but could not be read
        """
        resolved = self.resolve(path)
        try:
            return resolved.file_path.read_bytes()
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError(path)
        except OSError as e:
            raise StorageError("Error reading state", e) from e

    def write(self, path: str, data: bytes) -> None:
        """
        Create or replace an object.

        The content is written to a temporary file next to the destination
        and moved into place with os.replace, so a concurrent reader sees
        either the previous content or the new content.

        Args:
            path: Resource path of the object
            data: Raw bytes to store
        """
        resolved = self.resolve(path)
        try:
            resolved.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("Error creating directory", e) from e

        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=resolved.directory,
                prefix=f".{resolved.file_path.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise StorageError("Error creating file", e) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, resolved.file_path)
        except OSError as e:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise StorageError("Error writing to file", e) from e

        logger.info("Updated state %s", resolved)

    def delete(self, path: str) -> None:
        """
        Delete an object.

        Raises:
            NotFoundError: No object exists at the path (also on repeated deletes)
            StorageError: The file could not be removed
        """
        resolved = self.resolve(path)
        try:
            resolved.file_path.unlink()
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError(path)
        except OSError as e:
            raise StorageError("Error deleting state", e) from e

        logger.info("Deleted state %s", resolved)

    def exists(self, path: str) -> bool:
        """Check if an object exists in the store."""
        return self.resolve(path).file_path.is_file()
