"""Module entrypoint for ``python -m favdir``."""

from .cli import main


if __name__ == "__main__":
    main()
