"""
Guess State - The phases of one guessing round.

Design principles:
- Tagged variant: one frozen class per phase
- Each variant carries only the data valid in that phase
- Immutable: transitions build a new variant (see reducer)
- Only Revealed can produce a result
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .cards import DEFAULT_BITS, compute_number


class Phase(Enum):
    """Stages of a guessing round."""
    IDLE = "idle"  # Start screen
    ASKING = "asking"  # Showing cards, collecting answers
    THINKING = "thinking"  # All answers in, pause before reveal
    REVEALED = "revealed"  # Number shown


@dataclass(frozen=True)
class Idle:
    """Waiting for the player to start."""
    phase = Phase.IDLE

    @property
    def answers(self) -> tuple[bool, ...]:
        return ()

    @property
    def question_index(self) -> int:
        return 0


@dataclass(frozen=True)
class Asking:
    """
    Collecting answers.

    The card currently shown is the one at question_index,
    which is always the number of answers given so far.
    """
    answers: tuple[bool, ...] = ()
    phase = Phase.ASKING

    @property
    def question_index(self) -> int:
        return len(self.answers)


@dataclass(frozen=True)
class Thinking:
    """Every card answered; the reveal is scheduled."""
    answers: tuple[bool, ...]
    phase = Phase.THINKING

    @property
    def question_index(self) -> int:
        return len(self.answers)


@dataclass(frozen=True)
class Revealed:
    """
    The number is shown.

    bits is the round width; answers must hold exactly that many.
    """
    answers: tuple[bool, ...]
    bits: int = DEFAULT_BITS
    phase = Phase.REVEALED

    @property
    def question_index(self) -> int:
        return len(self.answers)

    @property
    def result(self) -> int:
        """The guessed number, derived from the answers."""
        return compute_number(self.answers, bits=self.bits)


GuessState = Union[Idle, Asking, Thinking, Revealed]
