"""Allow ``python -m hlsmith``."""

from hlsmith.cli import main


if __name__ == "__main__":
    main()
