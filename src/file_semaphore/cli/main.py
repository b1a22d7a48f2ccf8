"""CLI entrypoint."""

import argparse
import logging
import sys
from dataclasses import replace

from file_semaphore.cli.parser import parse_arguments
from file_semaphore.core.config import LockStoreConfig
from file_semaphore.core.constants import (
    EXIT_ERROR,
    EXIT_NOT_HELD,
    EXIT_OK,
    GUARD_NONE,
)
from file_semaphore.core.exceptions import FileSemaphoreError
from file_semaphore.core.locks import KeyedFileLock
from file_semaphore.core.logging import flush_logging_handlers, setup_logging, with_log_context


def resolve_config(args: argparse.Namespace, logger: logging.Logger) -> LockStoreConfig:
    """Merge CLI arguments over environment configuration.

    Priority: 1) CLI argument, 2) Environment variable / .env, 3) Default
    """
    config = LockStoreConfig.from_env(root_path=args.root, logger=logger)
    if args.lease_seconds is not None:
        config = replace(config, lease_seconds=args.lease_seconds)
    if args.guard is not None:
        config = replace(config, guard=args.guard)
    return config


def _print_status(store: KeyedFileLock, key: str | None) -> int:
    if key is not None:
        record = store.read_lease(key)
        if record is None:
            print(f"{key}: free")
            return EXIT_NOT_HELD
        if record.is_expired():
            print(f"{key}: expired at {record.expires_at}")
            return EXIT_NOT_HELD
        print(f"{key}: held, expires at {record.expires_at} ({record.seconds_remaining()}s remaining)")
        return EXIT_OK

    records = store.leases()
    if not records:
        print(f"No leases under {store.root_path}")
        return EXIT_OK
    for record in records:
        state = "expired" if record.is_expired() else "held"
        print(f"{record.key}\t{state}\t{record.expires_at}")
    return EXIT_OK


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command and return its exit code."""
    logger = setup_logging(log_level=args.log_level, log_format=args.log_format, stream=sys.stderr)

    try:
        config = resolve_config(args, logger)
        store = KeyedFileLock.from_config(
            config,
            logger=with_log_context(logging.getLogger("file_semaphore.core.locks.keyed"), root=str(config.root_path)),
        )
        if config.guard != GUARD_NONE:
            logger.debug(f"Using {config.guard} guard for {config.root_path}")

        if args.command == "acquire":
            return EXIT_OK if store.acquire(args.key) else EXIT_NOT_HELD
        if args.command == "release":
            return EXIT_OK if store.release(args.key) else EXIT_NOT_HELD
        return _print_status(store, args.key)
    except (FileSemaphoreError, OSError) as e:
        # OSError: root removed or unreadable after the store was created.
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        flush_logging_handlers()


def main(argv: list[str] | None = None) -> None:
    """Console script entrypoint."""
    sys.exit(run(parse_arguments(argv)))
