"""
Top-level package for gitp.

gitp drafts commit messages for staged Git changes with a language
model and lets the user refine them interactively. The command line
entry point lives in :mod:`gitp.cli`.
"""

__all__ = ["__version__"]

__version__ = "1.4.0"
