"""
Path resolution - maps request paths to files inside a storage root.
"""

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import PathTraversalError


@dataclass(frozen=True)
class ResolvedPath:
    """A request path resolved under a storage root."""
    file_path: Path
    directory: Path

    def __str__(self):
        return str(self.file_path)


class PathResolver:
    """
    Resolves caller-supplied paths under a fixed root directory.

    The path is anchored at "/" and normalized before joining, so "." and
    ".." segments and repeated separators collapse without climbing above the
    root. The joined path is then resolved (following symlinks) and must still
    lie strictly inside the root; anything else raises PathTraversalError.

    Usage:
        resolver = PathResolver("./data/states")
        resolved = resolver.resolve("env/prod.tfstate")
        resolved.file_path   # <abs>/data/states/env/prod.tfstate
        resolved.directory   # <abs>/data/states/env
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).absolute()

    def resolve(self, request_path: str) -> ResolvedPath:
        if "\x00" in request_path:
            raise PathTraversalError(f"Path {request_path!r} contains a NUL byte")
        relative = posixpath.normpath("/" + request_path).lstrip("/")
        if not relative or relative == ".":
            raise PathTraversalError(f"Path '{request_path}' does not name an object")

        candidate = self.root / relative
        self._check_containment(candidate, request_path)
        return ResolvedPath(file_path=candidate, directory=candidate.parent)

    def _check_containment(self, candidate: Path, request_path: str) -> None:
        real_root = self.root.resolve()
        real_candidate = candidate.resolve()
        if real_candidate == real_root or real_root not in real_candidate.parents:
            raise PathTraversalError(
                f"Path '{request_path}' resolves outside the storage root"
            )
