"""Entry point for ``python -m sessionhost``."""

import sys


def main() -> int:
    """Main entry point for the sessionhost CLI."""
    from sessionhost.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
