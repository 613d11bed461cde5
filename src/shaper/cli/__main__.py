"""Entry point for ``python -m shaper.cli``."""

from shaper.cli.main import main


if __name__ == "__main__":
    main()
