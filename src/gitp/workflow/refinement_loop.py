"""
The generate / present / feedback loop.

:class:`RefinementLoop` asks a generator for a commit message, shows it,
and reads the user's feedback. Empty feedback (or auto-accept mode)
accepts the pair; anything else is recorded as an :class:`Attempt` and a
new pair is generated with the full history. After
:data:`MAX_ATTEMPTS` rejections the loop stops with the last generated
pair. An empty generation result aborts the loop.

The loop performs no I/O itself: generation, presentation and input are
injected callables, which keeps the CLI in charge of the terminal.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

from gitp.models import Attempt, GenerationResult


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


MAX_ATTEMPTS = 10


class LoopStatus(enum.Enum):
    """How the loop terminated."""

    ACCEPTED = "accepted"
    CEILING_REACHED = "ceiling-reached"
    EMPTY_RESULT = "empty-result"


@dataclass
class LoopOutcome:
    """Final state of one loop run.

    Attributes
    ----------
    status : LoopStatus
        Termination reason.
    result : GenerationResult
        The accepted pair, the last generated pair when the ceiling was
        reached, or an empty result.
    history : List[Attempt]
        Rejected attempts, oldest first.
    generations : int
        Number of generation requests issued.
    """

    status: LoopStatus
    result: GenerationResult
    history: List[Attempt] = field(default_factory=list)
    generations: int = 0

    @property
    def should_commit(self) -> bool:
        return self.status in (LoopStatus.ACCEPTED, LoopStatus.CEILING_REACHED)


class RefinementLoop:
    """Drive generation until the user accepts or the ceiling is reached.

    Parameters
    ----------
    generate : callable
        ``generate(history) -> GenerationResult``. May raise; errors
        propagate out of :meth:`run`.
    present : callable
        ``present(result)`` shows a generated pair to the user.
    ask_feedback : callable
        ``ask_feedback() -> str``; an empty string accepts.
    max_attempts : int, optional
        Number of rejections after which the loop gives up.
    auto_accept : bool, optional
        Accept the first generated pair without asking.
    """

    def __init__(
        self,
        generate: Callable[[Sequence[Attempt]], GenerationResult],
        present: Callable[[GenerationResult], None],
        ask_feedback: Callable[[], str],
        max_attempts: int = MAX_ATTEMPTS,
        auto_accept: bool = False,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.generate = generate
        self.present = present
        self.ask_feedback = ask_feedback
        self.max_attempts = max_attempts
        self.auto_accept = auto_accept

    def run(self) -> LoopOutcome:
        history: List[Attempt] = []
        generations = 0
        result = GenerationResult.empty()

        while len(history) < self.max_attempts:
            result = self.generate(tuple(history))
            generations += 1
            if result.is_empty:
                logger.debug("Generation %d returned an empty result", generations)
                return LoopOutcome(LoopStatus.EMPTY_RESULT, result, history, generations)

            self.present(result)
            if self.auto_accept:
                return LoopOutcome(LoopStatus.ACCEPTED, result, history, generations)

            feedback = (self.ask_feedback() or "").strip()
            if not feedback:
                return LoopOutcome(LoopStatus.ACCEPTED, result, history, generations)

            history.append(
                Attempt(
                    message=result.commit_message,
                    description=result.commit_description,
                    feedback=feedback,
                )
            )
            logger.debug("Attempt %d rejected: %s", len(history), feedback)

        logger.debug("No message accepted after %d attempts", len(history))
        return LoopOutcome(LoopStatus.CEILING_REACHED, result, history, generations)
