"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session operations
2. Manages sessions
3. Formats snapshots for display

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Lookups and transitions return an ErrorResponse instead of raising.
"""

from __future__ import annotations
from dataclasses import dataclass, replace

from .schemas import (
    CreateSessionRequest,
    SessionResponse,
    CardsResponse,
    ErrorResponse,
    ErrorCode,
    SessionPhase,
)
from ..engine_core.action import ActionResult
from ..engine_core.cards import generate_cards
from ..engine_core.state import Phase
from ..session import SessionManager, Session


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        manager = SessionManager(scheduler=AsyncioScheduler())
        service = APIService(session_manager=manager)

        # inside the running event loop:
        session = service.create_session(CreateSessionRequest())
        service.start(session.session_id)
        service.answer(session.session_id, yes=True)
    """
    session_manager: SessionManager

    def create_session(self, request: CreateSessionRequest | None = None) -> SessionResponse:
        """
        Create a new session, optionally overriding the default config.
        """
        request = request or CreateSessionRequest()
        config = self.session_manager.config

        overrides = {}
        if request.thinking_delay is not None:
            overrides["thinking_delay"] = request.thinking_delay
        if request.restart_phases is not None:
            overrides["restart_phases"] = frozenset(Phase(p.value) for p in request.restart_phases)
        if overrides:
            config = replace(config, **overrides)

        session = self.session_manager.create_session(config=config)
        if request.auto_start:
            session.start()

        return self.session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """
        Get session snapshot.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self.session_to_response(session)

    def start(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Start a round."""
        return self._run(session_id, lambda s: s.start())

    def answer(self, session_id: str, yes: bool) -> SessionResponse | ErrorResponse:
        """Answer the current card."""
        return self._run(session_id, lambda s: s.submit_answer(yes))

    def restart(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Return to the start screen."""
        return self._run(session_id, lambda s: s.restart())

    def end_session(self, session_id: str) -> bool:
        """
        End a session.
        """
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        """
        List active session IDs.
        """
        return self.session_manager.list_active_sessions()

    def get_cards(self) -> CardsResponse:
        """Cards for the default config."""
        config = self.session_manager.config
        cards = generate_cards(config.bits)
        return CardsResponse(
            cards=[list(card) for card in cards],
            max_number=config.max_number,
            count=len(cards),
        )

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _run(self, session_id: str, operation) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        result: ActionResult = operation(session)
        if not result.success:
            return ErrorResponse(
                error=result.error or "Invalid transition",
                error_code=ErrorCode.INVALID_TRANSITION,
                details={"phase": session.phase.value},
            )

        return self.session_to_response(session)

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        card = session.current_card
        return SessionResponse(
            session_id=session.session_id,
            phase=SessionPhase(session.phase.value),
            question_index=session.question_index,
            total_questions=session.total_questions,
            progress=session.progress,
            card=list(card) if card is not None else None,
            result=session.result,
            can_restart=session.can_restart,
            max_number=session.config.max_number,
            created_at=session.created_at,
        )
