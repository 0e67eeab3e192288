"""
Session Manager - Creates and manages guessing sessions.

LIFECYCLE:
1. Session created → Idle (start screen)
2. start() → Asking, first card shown
3. submit_answer() once per card
4. Last answer → Thinking, reveal timer scheduled
5. Timer fires → Revealed
6. restart() → Idle (same session, fresh round), or start() → Asking

TIMER RULES:
- At most one reveal timer per session
- start() and restart() cancel it AND bump the generation
- The timer callback re-checks generation and phase before revealing,
  so a fire that slipped past cancellation is ignored

PERSISTENCE RULES:
- In-memory only
- end_session() drops the session, cancels its timer and tells its
  listeners (session.closed is True); cleanup_stale_sessions() uses it too
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import time
import uuid

from ..config import GameConfig
from ..engine_core.cards import generate_cards
from ..engine_core.state import GuessState, Phase, Idle, Revealed
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

Listener = Callable[["Session"], Any]


@dataclass
class Session:
    """
    One player's guessing session.

    Contains:
    - The current phase (tagged variant)
    - The pending reveal timer, if any
    - A generation counter that invalidates stale timers
    - Change listeners (presentation adapters)

    Invalid operations (answering outside Asking, restarting where the
    config forbids it) are rejected: the state is left untouched and the
    returned ActionResult has success=False.
    """
    session_id: str
    scheduler: Scheduler
    config: GameConfig = field(default_factory=GameConfig)
    created_at: float = field(default_factory=time.time)

    state: GuessState = field(default_factory=Idle)
    generation: int = 0
    closed: bool = False

    _pending_reveal: TimerHandle | None = None
    _listeners: list[Listener] = field(default_factory=list)

    def __post_init__(self):
        self._reducer = Reducer(
            bits=self.config.bits,
            restart_phases=self.config.restart_phases,
        )
        self._cards = generate_cards(self.config.bits)

    # =========================================================================
    # Operations
    # =========================================================================

    def start(self) -> ActionResult:
        """Begin a new round from the first card."""
        return self._dispatch(Action.start(), reset=True)

    def submit_answer(self, yes: bool) -> ActionResult:
        """Answer the current card."""
        return self._dispatch(Action.submit_answer(yes))

    def restart(self) -> ActionResult:
        """Drop the round and return to the start screen."""
        return self._dispatch(Action.restart(), reset=True)

    def close(self):
        """
        Cancel any pending timer, tell listeners the session is closed,
        then forget them.
        """
        self._cancel_reveal()
        self.generation += 1
        self.closed = True
        self._notify()
        self._listeners.clear()

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def question_index(self) -> int:
        return self.state.question_index

    @property
    def answers(self) -> list[bool]:
        return list(self.state.answers)

    @property
    def cards(self) -> tuple[tuple[int, ...], ...]:
        return self._cards

    @property
    def total_questions(self) -> int:
        return len(self._cards)

    @property
    def current_card(self) -> tuple[int, ...] | None:
        """Numbers on the card being asked; None outside Asking."""
        if self.phase != Phase.ASKING:
            return None
        return self._cards[self.question_index]

    @property
    def progress(self) -> float:
        """Fraction of cards answered."""
        return self.question_index / self.total_questions

    @property
    def result(self) -> int | None:
        """The guessed number once revealed."""
        if isinstance(self.state, Revealed):
            return self.state.result
        return None

    @property
    def can_restart(self) -> bool:
        return self._reducer.can_restart(self.state)

    @property
    def has_pending_reveal(self) -> bool:
        return self._pending_reveal is not None and not self._pending_reveal.cancelled

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: Listener):
        """Call listener(session) after every transition and once on close."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # =========================================================================
    # Internals
    # =========================================================================

    def _dispatch(self, action: Action, reset: bool = False) -> ActionResult:
        result = self._reducer.apply(self.state, action)
        if not result.success:
            logger.warning(
                "Session %s rejected %s in %s: %s",
                self.session_id, action.action_type.value, self.phase.value, result.error,
            )
            return result

        if reset:
            self._cancel_reveal()
            self.generation += 1

        self._transition(result)
        return result

    def _transition(self, result: ActionResult):
        # Arm the timer before committing: if the scheduler raises,
        # the session keeps its previous state
        if result.schedule_reveal:
            self._schedule_reveal()

        self.state = result.new_state
        logger.debug(
            "Session %s -> %s (%s)",
            self.session_id, self.phase.value, "; ".join(result.state_changes),
        )
        self._notify()

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    def _schedule_reveal(self):
        self._cancel_reveal()
        generation = self.generation
        self._pending_reveal = self.scheduler.call_later(
            self.config.thinking_delay,
            lambda: self._on_reveal_timer(generation),
        )

    def _on_reveal_timer(self, generation: int):
        if generation != self.generation or self.phase != Phase.THINKING:
            logger.debug(
                "Session %s ignored stale reveal timer (generation %d, now %d)",
                self.session_id, generation, self.generation,
            )
            return

        self._pending_reveal = None
        result = self._reducer.apply(self.state, Action.reveal())
        self._transition(result)
        logger.info("Session %s revealed %d", self.session_id, self.result)

    def _cancel_reveal(self):
        if self._pending_reveal is not None:
            self._pending_reveal.cancel()
            self._pending_reveal = None


class SessionManager:
    """
    Manages guessing sessions.

    Responsibilities:
    - Create sessions with a shared scheduler and default config
    - Track active sessions
    - Clean up ended and stale sessions

    No persistence - sessions are in-memory only.

    The scheduler is required: an AsyncioScheduler for a server
    running an event loop, a ManualScheduler anywhere else.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: GameConfig | None = None,
    ):
        self.scheduler = scheduler
        self.config = config or GameConfig()
        self._sessions: dict[str, Session] = {}

    def create_session(self, config: GameConfig | None = None) -> Session:
        """
        Create a new session in Idle.

        Args:
            config: Per-session settings (defaults to the manager's)

        Returns:
            New Session ready to start
        """
        session = Session(
            session_id=str(uuid.uuid4()),
            scheduler=self.scheduler,
            config=config or self.config,
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s (%d cards)", session.session_id, session.total_questions)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """
        End a session and clean up.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        session.close()
        logger.info("Ended session %s", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of live sessions."""
        return list(self._sessions.keys())

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions older than max_age.

        Called periodically to free memory. Returns the number removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id)

        return len(to_remove)
