"""Main entry point dispatcher for shaper commands."""

import sys


def main():
    """Point at the command-line interface."""
    print("Use 'shaperctl' or 'python -m shaper.cli' for the command-line interface")
    sys.exit(1)


if __name__ == "__main__":
    main()
