"""Core module - configuration, errors, logging and the lease store.

This module provides the building blocks used by the CLI:
- Custom exceptions
- Configuration dataclass
- Constants and defaults
- The keyed file lock store
"""

from file_semaphore.core.config import LockStoreConfig
from file_semaphore.core.constants import (
    DEFAULT_LEASE_SECONDS,
    GUARD_FCNTL,
    GUARD_MODES,
    GUARD_NONE,
)
from file_semaphore.core.exceptions import (
    AcquisitionError,
    ConfigurationError,
    FileSemaphoreError,
    InvalidKeyError,
    ProvisioningError,
)
from file_semaphore.core.locks import KeyedFileLock, LeaseHold, LeaseRecord

__all__ = [
    # Exceptions
    "FileSemaphoreError",
    "ConfigurationError",
    "ProvisioningError",
    "AcquisitionError",
    "InvalidKeyError",
    # Config
    "LockStoreConfig",
    # Constants
    "DEFAULT_LEASE_SECONDS",
    "GUARD_NONE",
    "GUARD_FCNTL",
    "GUARD_MODES",
    # Locks
    "KeyedFileLock",
    "LeaseHold",
    "LeaseRecord",
]
