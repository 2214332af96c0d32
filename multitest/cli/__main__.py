"""Module wrapper so running ``python -m multitest.cli`` matches the console script."""

from multitest.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
