"""Main entry point for mintdb CLI when run as a module."""

from mintdb.cli.main import main

if __name__ == "__main__":
    main()
