"""
API Module - Front-end interface.

Exposes the engine via REST API and WebSocket.
A front end:
1. Creates a session
2. Starts a round
3. Posts one answer per card
4. Waits for the reveal (WebSocket push or polling)
5. Restarts or starts again

All state is session-scoped and in-memory.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    AnswerRequest,
    # Responses
    SessionResponse,
    CardsResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    SessionPhase,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "AnswerRequest",
    # Responses
    "SessionResponse",
    "CardsResponse",
    "ErrorResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "HealthResponse",
    # Enums
    "SessionPhase",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
