"""
Interactive workflow pieces for gitp.
"""

from .refinement_loop import MAX_ATTEMPTS, LoopOutcome, LoopStatus, RefinementLoop  # noqa: F401
