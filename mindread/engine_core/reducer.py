"""
Reducer - Applies actions to guess state.

The reducer is the single point of state transition.
All phase changes must go through Reducer.apply().

Design principles:
- Pure function: (state, action) -> new_state
- Validates the phase before applying
- Returns ActionResult with success/failure
- Never raises for an action in the wrong phase; the caller keeps its state
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .cards import DEFAULT_BITS
from .state import GuessState, Phase, Idle, Asking, Thinking, Revealed
from .action import Action, ActionType, ActionResult

ALL_PHASES = frozenset(Phase)


@dataclass
class Reducer:
    """
    Reducer applies actions to guess state.

    Stateless - all state is in the GuessState variant.
    bits fixes how many answers complete a round.
    restart_phases lists the phases where a restart is honoured.
    """
    bits: int = DEFAULT_BITS
    restart_phases: frozenset[Phase] = field(default_factory=lambda: ALL_PHASES)

    def apply(self, state: GuessState, action: Action) -> ActionResult:
        """
        Apply an action to the guess state.

        Returns ActionResult with new state or error.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            return ActionResult.failure(validation_error, error_code="INVALID_PHASE")

        handler = self._get_handler(action.action_type)
        return handler(state, action)

    def can_restart(self, state: GuessState) -> bool:
        """Whether a restart is honoured in the state's phase."""
        return state.phase in self.restart_phases

    def _validate_action(self, state: GuessState, action: Action) -> str | None:
        """
        Validate that an action is legal in the current phase.

        Returns error message if invalid, None if valid.
        """
        phase = state.phase

        if action.action_type == ActionType.START:
            # Starting mid-round throws the round away, same as a restart
            if phase in {Phase.ASKING, Phase.THINKING} and not self.can_restart(state):
                return f"Cannot start a new round while {phase.value}"

        elif action.action_type == ActionType.ANSWER:
            if phase != Phase.ASKING:
                return f"Answers are only accepted while asking, not while {phase.value}"
            if action.answer is None:
                return "Answer action without an answer"

        elif action.action_type == ActionType.REVEAL:
            if phase != Phase.THINKING:
                return f"Nothing to reveal while {phase.value}"

        elif action.action_type == ActionType.RESTART:
            if not self.can_restart(state):
                return f"Restart is disabled while {phase.value}"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START: self._handle_start,
            ActionType.ANSWER: self._handle_answer,
            ActionType.REVEAL: self._handle_reveal,
            ActionType.RESTART: self._handle_restart,
        }
        return handlers[action_type]

    def _handle_start(self, state: GuessState, action: Action) -> ActionResult:
        return ActionResult.success_with_state(
            Asking(answers=()),
            changes=["Round started"],
        )

    def _handle_answer(self, state: Asking, action: Action) -> ActionResult:
        """Record one answer; the last one moves the round to thinking."""
        answers = state.answers + (action.answer,)
        change = f"Card {len(answers)}: {'yes' if action.answer else 'no'}"

        if len(answers) < self.bits:
            return ActionResult.success_with_state(Asking(answers=answers), changes=[change])

        return ActionResult.success_with_state(
            Thinking(answers=answers),
            changes=[change, "Thinking"],
            schedule_reveal=True,
        )

    def _handle_reveal(self, state: Thinking, action: Action) -> ActionResult:
        revealed = Revealed(answers=state.answers, bits=self.bits)
        return ActionResult.success_with_state(
            revealed,
            changes=[f"Revealed {revealed.result}"],
        )

    def _handle_restart(self, state: GuessState, action: Action) -> ActionResult:
        return ActionResult.success_with_state(Idle(), changes=["Restarted"])

