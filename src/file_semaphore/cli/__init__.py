"""CLI module - Command-line interface components."""

from file_semaphore.cli.main import main, run
from file_semaphore.cli.parser import parse_arguments

__all__ = [
    "main",
    "parse_arguments",
    "run",
]
