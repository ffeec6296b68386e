"""Allow ``python -m texrunner``."""

from texrunner.ui.cli import main


if __name__ == "__main__":
    main()
