#!/usr/bin/env python3
"""CLI entry point."""

import sys

from chartbroker.cli.main import main


def cli_main() -> None:
    """Entry point function for console scripts."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
