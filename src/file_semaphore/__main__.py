"""Allow ``python -m file_semaphore``."""

from file_semaphore.cli.main import main

if __name__ == "__main__":
    main()
