"""Keyed lease store backed by one file per key.

Design principles:
- A lease record is ``<root>/<key>`` whose whole content is the decimal
  UNIX timestamp after which the lease is abandoned.
- Unreadable or corrupt records are treated as expired, never as errors.
- No holder identity is stored; any caller may release any key.
- Without a guard, the read-compare-write in acquire() is not atomic
  across processes. Two callers observing the same absent or expired
  record can both succeed.
"""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path

from file_semaphore.core.config import LockStoreConfig
from file_semaphore.core.constants import (
    DEFAULT_LEASE_SECONDS,
    GUARD_NONE,
    LEASE_FILE_MODE,
    RESERVED_KEYS,
    ROOT_DIRECTORY_MODE,
)
from file_semaphore.core.exceptions import AcquisitionError, InvalidKeyError, ProvisioningError
from file_semaphore.core.locks.guards import create_guard


def _now() -> int:
    return int(time.time())


def _write_all(fd: int, payload: bytes) -> None:
    """Write complete payload to fd, handling short writes."""
    total_written = 0
    while total_written < len(payload):
        written = os.write(fd, payload[total_written:])
        if written <= 0:
            raise OSError("short write while persisting lease record")
        total_written += written


_EXPIRY_PATTERN = re.compile(r"-?[0-9]+")


def _parse_expiry(raw: str) -> int | None:
    """Parse a plain decimal timestamp; anything else (``+5``, ``1_000``) is corrupt."""
    value = raw.strip()
    if not _EXPIRY_PATTERN.fullmatch(value):
        return None
    return int(value)


def validate_key(key: str) -> str:
    """Return ``key`` if it is usable as a single path segment.

    Raises:
        InvalidKeyError: For empty keys, ``.``/``..`` or keys containing a separator or NUL
    """
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(str(key), "key must be a non-empty string")
    if key in RESERVED_KEYS:
        raise InvalidKeyError(key, "key must not refer to a directory")
    separators = {"/", os.sep, "\0"}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in key for sep in separators):
        raise InvalidKeyError(key, "key must not contain path separators or NUL")
    return key


@dataclass(frozen=True)
class LeaseRecord:
    """Parsed view of a lease record on disk."""

    key: str
    expires_at: int
    path: Path

    def is_expired(self, now: int | None = None) -> bool:
        return self.expires_at <= (_now() if now is None else now)

    def seconds_remaining(self, now: int | None = None) -> int:
        return max(0, self.expires_at - (_now() if now is None else now))


class KeyedFileLock:
    """Non-blocking keyed semaphore whose leases live on a shared filesystem.

    Usage:
        store = KeyedFileLock("/mnt/shared/locks", default_lease_seconds=300)
        if store.acquire("nightly-import"):
            try:
                run_import()
            finally:
                store.release("nightly-import")

    Args:
        root_path: Directory holding one lease record per key. Created with
            missing ancestors if absent.
        default_lease_seconds: Lease duration applied by acquire(). Negative
            values are clamped to 0.
        logger: Destination for status messages.
        guard: "none" (default) or "fcntl" to serialize read-compare-write.

    Raises:
        ProvisioningError: If the root cannot be used as a writable directory
        ConfigurationError: If the guard mode is unknown or unsupported
    """

    def __init__(
        self,
        root_path: str | os.PathLike[str],
        default_lease_seconds: int = DEFAULT_LEASE_SECONDS,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        *,
        guard: str | None = GUARD_NONE,
    ):
        self.root_path = Path(root_path)
        self.default_lease_seconds = max(0, int(default_lease_seconds))
        self.logger = logger or logging.getLogger(__name__)

        self._guard = create_guard(guard, self.root_path)
        self._provision_root()

        if self.default_lease_seconds <= 0:
            self.logger.warning(
                "Lease duration is %d seconds; every lease expires immediately and keys are never exclusive",
                self.default_lease_seconds,
            )

    @classmethod
    def from_config(
        cls,
        config: LockStoreConfig,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> KeyedFileLock:
        return cls(
            config.root_path,
            default_lease_seconds=config.lease_seconds,
            logger=logger,
            guard=config.guard,
        )

    @property
    def guard(self) -> str:
        return self._guard.name

    def _provision_root(self) -> None:
        path = self.root_path
        try:
            if path.exists():
                if not path.is_dir():
                    raise ProvisioningError("Expected directory, got file on the given path", path=str(path))
                if not os.access(path, os.W_OK):
                    raise ProvisioningError("Directory is not writable", path=str(path))
            else:
                try:
                    path.mkdir(mode=ROOT_DIRECTORY_MODE, parents=True, exist_ok=True)
                except OSError as e:
                    raise ProvisioningError(
                        "Failed to create directory on the given path",
                        path=str(path),
                        details=str(e),
                        original_error=e,
                    ) from e
        except ProvisioningError as e:
            self.logger.critical(str(e))
            raise

    def lease_path(self, key: str) -> Path:
        """Return the lease record path for ``key``."""
        return self.root_path / validate_key(key)

    def _read_expiry(self, lease_path: Path) -> tuple[bool, int | None]:
        """Return (exists, expiry). Expiry is None when unreadable or corrupt."""
        if not lease_path.exists():
            return False, None
        try:
            raw = lease_path.read_text(encoding="ascii")
        except FileNotFoundError:
            return False, None
        except (OSError, UnicodeDecodeError):
            return True, None
        return True, _parse_expiry(raw)

    def _write_expiry(self, lease_path: Path, expires_at: int) -> None:
        fd = os.open(str(lease_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, LEASE_FILE_MODE)
        try:
            _write_all(fd, str(expires_at).encode("ascii"))
            os.fsync(fd)
        finally:
            os.close(fd)

    def acquire(self, key: str) -> bool:
        """Try to take ``key`` for ``default_lease_seconds`` from now.

        Returns:
            True if the caller now holds the lease, False if it is held elsewhere.

        Raises:
            InvalidKeyError: If ``key`` is not a single path segment
            AcquisitionError: If the lease record could not be written
        """
        lease_path = self.lease_path(key)

        try:
            # Entering the guard may itself fail (root removed or unreadable).
            with self._guard.section():
                exists, expires_at = self._read_expiry(lease_path)
                if exists:
                    if expires_at is not None and expires_at > _now():
                        self.logger.info('Key "%s" exists and expires in future', key)
                        return False
                    self.logger.info('Key "%s" exists, but expired', key)

                self._write_expiry(lease_path, _now() + self.default_lease_seconds)
        except OSError as e:
            self.logger.critical('Failed to acquire key "%s"', key)
            raise AcquisitionError(key, details=str(e), original_error=e) from e

        self.logger.info('Acquired new key "%s"', key)
        return True

    def release(self, key: str) -> bool:
        """Delete the lease record for ``key`` regardless of who acquired it.

        Returns:
            True if a record was removed, False otherwise. Never raises for
            filesystem failures.
        """
        lease_path = self.lease_path(key)
        try:
            lease_path.unlink()
        except OSError:
            self.logger.info('Failed to release key "%s"', key)
            return False

        self.logger.info('Released key "%s"', key)
        return True

    def read_lease(self, key: str) -> LeaseRecord | None:
        """Read the lease record for ``key`` for diagnostics, if parseable."""
        lease_path = self.lease_path(key)
        _, expires_at = self._read_expiry(lease_path)
        if expires_at is None:
            return None
        return LeaseRecord(key=key, expires_at=expires_at, path=lease_path)

    def is_held(self, key: str) -> bool:
        """Return True if ``key`` has a lease expiring in the future."""
        record = self.read_lease(key)
        return record is not None and not record.is_expired()

    def leases(self) -> list[LeaseRecord]:
        """Return all parseable lease records under the root, sorted by key."""
        records = []
        for entry in sorted(self.root_path.iterdir(), key=lambda p: p.name):
            if not entry.is_file():
                continue
            _, expires_at = self._read_expiry(entry)
            if expires_at is None:
                continue
            records.append(LeaseRecord(key=entry.name, expires_at=expires_at, path=entry))
        return records

    def hold(self, key: str) -> LeaseHold:
        """Return a context manager that acquires ``key`` and releases it on exit."""
        return LeaseHold(self, key)


class LeaseHold:
    """Context manager around acquire()/release() for one key.

    Usage:
        with store.hold("report") as lease:
            if not lease.acquired:
                print("Another run holds the report lease")
                return
            # ... critical section ...
    """

    def __init__(self, store: KeyedFileLock, key: str):
        self.store = store
        self.key = validate_key(key)
        self.acquired = False

    def __enter__(self) -> LeaseHold:
        self.acquired = self.store.acquire(self.key)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.acquired:
            self.store.release(self.key)
