"""Configuration for file-semaphore lock stores.

``LockStoreConfig`` can be built directly in code or from environment
variables (optionally loaded from a ``.env`` file).
"""

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from file_semaphore.core.constants import (
    DEFAULT_LEASE_SECONDS,
    ENV_GUARD,
    ENV_LEASE_SECONDS,
    ENV_ROOT,
    GUARD_MODES,
    GUARD_NONE,
)
from file_semaphore.core.exceptions import ConfigurationError


def _parse_env_numeric(value: str | None, cast: Callable[[str], Any]) -> Any | None:
    """Parse an environment value, returning None when invalid."""
    if value is None:
        return None
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        return None
    return parsed


@dataclass
class LockStoreConfig:
    """Configuration for a keyed file lock store.

    Attributes:
        root_path: Directory holding one lease record per key
        lease_seconds: Lease duration applied by acquire() (default: 3600)
        guard: Guard mode around read-compare-write ("none" or "fcntl")
    """

    root_path: Path
    lease_seconds: int = DEFAULT_LEASE_SECONDS
    guard: str = GUARD_NONE

    def __post_init__(self) -> None:
        self.root_path = Path(self.root_path)
        self.guard = (self.guard or GUARD_NONE).strip().lower()
        if self.guard not in GUARD_MODES:
            raise ConfigurationError(
                f"Unknown guard mode '{self.guard}'",
                field="guard",
                details=f"expected one of: {', '.join(GUARD_MODES)}",
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_path": str(self.root_path),
            "lease_seconds": self.lease_seconds,
            "guard": self.guard,
        }

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        root_path: str | Path | None = None,
        load_dotenv_file: bool = True,
        logger: logging.Logger | None = None,
    ) -> "LockStoreConfig":
        """Build configuration from environment variables.

        Priority for each setting: 1) environment variable, 2) default.
        ``FILE_SEMAPHORE_ROOT`` has no default and must be set unless
        ``root_path`` is given.

        Args:
            environ: Mapping to read instead of ``os.environ``
            root_path: Explicit root, taking precedence over ``FILE_SEMAPHORE_ROOT``
            load_dotenv_file: Load a ``.env`` file into ``os.environ`` first
            logger: Logger for ignored-value warnings

        Raises:
            ConfigurationError: If the root is missing or the guard mode is unknown
        """
        log = logger or logging.getLogger(__name__)
        if load_dotenv_file:
            if load_dotenv(find_dotenv(usecwd=True)):
                log.debug(".env file loaded")
            else:
                log.debug(".env file not found")
        env = os.environ if environ is None else environ

        root = str(root_path) if root_path else env.get(ENV_ROOT, "").strip()
        if not root:
            raise ConfigurationError(f"{ENV_ROOT} is not set", field="root_path")

        lease_seconds = DEFAULT_LEASE_SECONDS
        parsed_lease = _parse_env_numeric(env.get(ENV_LEASE_SECONDS), int)
        if parsed_lease is not None and parsed_lease >= 0:
            lease_seconds = parsed_lease
        elif ENV_LEASE_SECONDS in env:
            log.warning(
                f"Ignoring invalid {ENV_LEASE_SECONDS}={env.get(ENV_LEASE_SECONDS)!r}; using default {lease_seconds}"
            )

        return cls(
            root_path=Path(root).expanduser(),
            lease_seconds=lease_seconds,
            guard=env.get(ENV_GUARD, GUARD_NONE),
        )
