"""Pytest configuration and fixtures for file-semaphore tests"""

import logging

import pytest

from file_semaphore.core.constants import ENV_GUARD, ENV_LEASE_SECONDS, ENV_ROOT
from file_semaphore.core.locks import KeyedFileLock


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handler/level changes made by setup_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler and handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Environment without file-semaphore variables and no reachable .env file."""
    for name in (ENV_ROOT, ENV_LEASE_SECONDS, ENV_GUARD, "LOG_LEVEL"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def lock_root(tmp_path):
    """Root directory path for lease records (not created yet)"""
    return tmp_path / "locks"


@pytest.fixture
def store(lock_root):
    """Lock store with a one hour lease"""
    return KeyedFileLock(lock_root, default_lease_seconds=3600)
