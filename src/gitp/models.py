"""
Value objects shared by the generator and the refinement loop.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Attempt:
    """A generated pair the user rejected, with the feedback given.

    Attributes
    ----------
    message : str
        The rejected commit message.
    description : str
        The rejected commit description.
    feedback : str
        What the user asked to change.
    """

    message: str
    description: str
    feedback: str


@dataclass(frozen=True)
class GenerationResult:
    """A generated commit message and description.

    Both fields are set, or both are empty to signal that generation
    produced nothing usable.
    """

    commit_message: str = ""
    commit_description: str = ""

    @classmethod
    def empty(cls) -> "GenerationResult":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.commit_message
