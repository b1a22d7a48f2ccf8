"""Constants and default values for file-semaphore."""

# ==================== LEASE DEFAULTS ====================

# Lease duration applied by acquire() when none is configured (1 hour)
DEFAULT_LEASE_SECONDS: int = 3600

# Permissions for root directories created on demand (owner rwx, others r-x)
ROOT_DIRECTORY_MODE: int = 0o755

# Permissions for newly created lease record files
LEASE_FILE_MODE: int = 0o644

# ==================== GUARD MODES ====================

GUARD_NONE: str = "none"  # Plain read-compare-write, not atomic across processes
GUARD_FCNTL: str = "fcntl"  # Advisory flock on the root directory around read-compare-write
GUARD_MODES: tuple[str, ...] = (GUARD_NONE, GUARD_FCNTL)

# ==================== ENVIRONMENT ====================

ENV_ROOT: str = "FILE_SEMAPHORE_ROOT"
ENV_LEASE_SECONDS: str = "FILE_SEMAPHORE_LEASE_SECONDS"
ENV_GUARD: str = "FILE_SEMAPHORE_GUARD"
ENV_LOG_LEVEL: str = "LOG_LEVEL"

# ==================== KEYS ====================

# Keys that would resolve to the root directory or its parent
RESERVED_KEYS: frozenset[str] = frozenset({".", ".."})

# ==================== CLI EXIT CODES ====================

EXIT_OK: int = 0
EXIT_NOT_HELD: int = 1  # Business outcome: key held elsewhere, nothing to release
EXIT_ERROR: int = 2  # Provisioning, acquisition or configuration failure
