"""
Smart context gathering.

Lightweight static analysis of the changed files (component names, local
imports, hooks, state management, importers) rendered as extra context
for the model.
"""

from .extractors import FileContext, extract_context  # noqa: F401
from .gatherer import MAX_CONTEXT_SIZE, TRIM_MARKER, gather_smart_context  # noqa: F401
from .walker import find_who_imports, iter_source_files  # noqa: F401
