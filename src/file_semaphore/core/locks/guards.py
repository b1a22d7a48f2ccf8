"""Guards serializing the read-compare-write section of acquire().

The default guard does nothing, which keeps the plain file protocol and its
known race between processes that observe the same absent or expired lease.
The fcntl guard holds an exclusive advisory lock on the root directory for
the duration of the section.
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

try:
    import fcntl
except ImportError:  # pragma: no cover - exercised on non-POSIX only
    fcntl = None

from file_semaphore.core.constants import GUARD_FCNTL, GUARD_MODES, GUARD_NONE
from file_semaphore.core.exceptions import ConfigurationError


class RegionGuard(Protocol):
    """Scoped exclusive section around a lease decision."""

    name: str

    def section(self) -> contextlib.AbstractContextManager[None]:
        """Enter the exclusive section; released on every exit path."""


class NullGuard:
    """No arbitration beyond the raw file operations."""

    name = GUARD_NONE

    @contextlib.contextmanager
    def section(self) -> Iterator[None]:
        yield


class FcntlDirectoryGuard:
    """Blocking `fcntl.flock` on the root directory descriptor."""

    name = GUARD_FCNTL

    def __init__(self, root_path: Path):
        self.root_path = root_path

    @staticmethod
    def is_supported() -> bool:
        return fcntl is not None

    @contextlib.contextmanager
    def section(self) -> Iterator[None]:
        fd = os.open(str(self.root_path), os.O_RDONLY)
        try:
            assert fcntl is not None  # For type checkers.
            fcntl.flock(fd, fcntl.LOCK_EX)
            try:
                yield
            finally:
                with contextlib.suppress(OSError):
                    fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            with contextlib.suppress(OSError):
                os.close(fd)


def create_guard(guard_name: str | None, root_path: Path) -> RegionGuard:
    """Create a guard by name ("none" or "fcntl")."""
    requested = (guard_name or GUARD_NONE).strip().lower()

    if requested == GUARD_NONE:
        return NullGuard()

    if requested == GUARD_FCNTL:
        if not FcntlDirectoryGuard.is_supported():
            raise ConfigurationError("fcntl guard is unavailable on this platform", field="guard")
        return FcntlDirectoryGuard(root_path)

    raise ConfigurationError(
        f"Unknown guard mode '{requested}'",
        field="guard",
        details=f"expected one of: {', '.join(GUARD_MODES)}",
    )
