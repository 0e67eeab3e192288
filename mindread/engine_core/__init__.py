"""
Engine Core - Deterministic guessing logic.

The engine is the runtime that:
1. Generates the question cards
2. Holds the phase of a round as a tagged variant
3. Applies actions via the reducer
4. Derives the guessed number from the answers
"""

from .cards import CARDS, DEFAULT_BITS, generate_cards, compute_number, answers_for, max_number
from .state import GuessState, Phase, Idle, Asking, Thinking, Revealed
from .action import Action, ActionType, ActionResult
from .reducer import Reducer, ALL_PHASES

__all__ = [
    "CARDS",
    "DEFAULT_BITS",
    "generate_cards",
    "compute_number",
    "answers_for",
    "max_number",
    "GuessState",
    "Phase",
    "Idle",
    "Asking",
    "Thinking",
    "Revealed",
    "Action",
    "ActionType",
    "ActionResult",
    "Reducer",
    "ALL_PHASES",
]
