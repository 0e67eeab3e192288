"""
Action System - Actions and results.

Actions represent:
1. Player actions (start, answer, restart)
2. System actions (reveal, fired by the thinking timer)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Player actions
    START = "start"
    ANSWER = "answer"
    RESTART = "restart"

    # System actions
    REVEAL = "reveal"  # Thinking pause elapsed


@dataclass
class Action:
    """
    A complete action to be applied to the guess state.

    Actions are:
    - Validated against the current phase
    - Applied atomically by the reducer
    """
    action_type: ActionType
    answer: bool | None = None  # Only for ANSWER

    @classmethod
    def start(cls) -> Action:
        """Factory for start action."""
        return cls(action_type=ActionType.START)

    @classmethod
    def submit_answer(cls, yes: bool) -> Action:
        """Factory for answer action."""
        return cls(action_type=ActionType.ANSWER, answer=bool(yes))

    @classmethod
    def restart(cls) -> Action:
        """Factory for restart action."""
        return cls(action_type=ActionType.RESTART)

    @classmethod
    def reveal(cls) -> Action:
        """Factory for the timer-driven reveal."""
        return cls(action_type=ActionType.REVEAL)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Errors (if failed)
    - Human-readable changes (for UI updates)
    """
    success: bool
    new_state: Any | None = None  # GuessState
    error: str | None = None
    error_code: str | None = None

    state_changes: list[str] = field(default_factory=list)

    # Set when the new state needs the reveal timer
    schedule_reveal: bool = False

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        schedule_reveal: bool = False,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            schedule_reveal=schedule_reveal,
        )
