"""
Module entry-point that makes the package runnable with

    python -m multitest

The behaviour is identical to the *multitest-cli* console script.
"""

from multitest.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
