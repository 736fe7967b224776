"""
Thin wrapper to invoke the gitp CLI.

Running ``python -m gitp`` is equivalent to running the ``gitp``
console script installed via ``pyproject.toml``.
"""

from gitp.cli import main


if __name__ == "__main__":
    main(prog_name="gitp")
