"""CLI argument parsing."""

import argparse

import argcomplete

from file_semaphore.core.constants import GUARD_MODES


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        prog="file-semaphore",
        description="File Semaphore - Keyed, expiring leases on a shared filesystem",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Take a lease for one hour (default)
  file-semaphore --root /mnt/shared/locks acquire nightly-import

  # Take a five-minute lease
  file-semaphore --root /mnt/shared/locks --lease-seconds 300 acquire nightly-import

  # Release it
  file-semaphore --root /mnt/shared/locks release nightly-import

  # Show all leases under the root
  file-semaphore --root /mnt/shared/locks status

  # Root and lease from the environment (or a .env file)
  FILE_SEMAPHORE_ROOT=/mnt/shared/locks file-semaphore status nightly-import

Exit codes:
  0  acquired / released / held
  1  held elsewhere / nothing to release / not held
  2  configuration, provisioning or acquisition error
""",
    )

    parser.add_argument(
        "--root",
        metavar="DIR",
        help="Lease record directory (default: $FILE_SEMAPHORE_ROOT)",
    )
    parser.add_argument(
        "--lease-seconds",
        type=int,
        metavar="N",
        help="Lease duration for acquire (default: $FILE_SEMAPHORE_LEASE_SECONDS or 3600)",
    )
    parser.add_argument(
        "--guard",
        choices=GUARD_MODES,
        help="Serialize read-compare-write with an advisory lock (default: $FILE_SEMAPHORE_GUARD or none)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log output format (default: text)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    acquire_parser = subparsers.add_parser("acquire", help="Try to take a lease on KEY")
    acquire_parser.add_argument("key", help="Lease key (a single path segment)")

    release_parser = subparsers.add_parser("release", help="Remove the lease on KEY")
    release_parser.add_argument("key", help="Lease key (a single path segment)")

    status_parser = subparsers.add_parser("status", help="Show one lease, or all leases under the root")
    status_parser.add_argument("key", nargs="?", help="Lease key (omit to list all)")

    argcomplete.autocomplete(parser)

    return parser.parse_args(argv)
