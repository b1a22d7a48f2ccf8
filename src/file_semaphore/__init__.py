"""
file-semaphore - keyed, expiring leases stored as files on a shared filesystem

Independent processes pointing at the same root directory coordinate
access to named resources without a central service.
"""

from file_semaphore.core import (
    AcquisitionError,
    ConfigurationError,
    FileSemaphoreError,
    InvalidKeyError,
    KeyedFileLock,
    LeaseHold,
    LeaseRecord,
    LockStoreConfig,
    ProvisioningError,
)

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "AcquisitionError",
    "ConfigurationError",
    "FileSemaphoreError",
    "InvalidKeyError",
    "KeyedFileLock",
    "LeaseHold",
    "LeaseRecord",
    "LockStoreConfig",
    "ProvisioningError",
]
