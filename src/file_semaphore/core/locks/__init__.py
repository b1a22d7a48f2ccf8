"""Locking subsystem for cross-process coordination.

Leases are plain files under a shared root directory, one per key.
"""

from file_semaphore.core.locks.guards import FcntlDirectoryGuard, NullGuard, create_guard
from file_semaphore.core.locks.keyed import KeyedFileLock, LeaseHold, LeaseRecord, validate_key

__all__ = [
    "FcntlDirectoryGuard",
    "KeyedFileLock",
    "LeaseHold",
    "LeaseRecord",
    "NullGuard",
    "create_guard",
    "validate_key",
]
