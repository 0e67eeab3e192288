"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a front end and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_TRANSITION: Operation not allowed in the current phase
- VALIDATION_ERROR: Request body could not be parsed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionPhase(str, Enum):
    """Phase values as exposed over the API."""
    IDLE = "idle"
    ASKING = "asking"
    THINKING = "thinking"
    REVEALED = "revealed"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new session. Omitted fields use server defaults."""
    thinking_delay: Optional[float] = Field(
        None, ge=0.0, le=10.0, description="Seconds of 'thinking' before the reveal"
    )
    restart_phases: Optional[list[SessionPhase]] = Field(
        None, description="Phases in which restart is allowed"
    )
    auto_start: bool = Field(False, description="Skip the start screen")


class AnswerRequest(BaseModel):
    """Answer to the current card."""
    yes: bool = Field(..., description="True if the number is on the card")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Snapshot of a session for display."""
    session_id: str
    phase: SessionPhase
    question_index: int = Field(0, description="Index of the card being asked (0-based)")
    total_questions: int
    progress: float = Field(0.0, ge=0.0, le=1.0)
    card: Optional[list[int]] = Field(None, description="Numbers on the current card, while asking")
    result: Optional[int] = Field(None, description="The guessed number, once revealed")
    can_restart: bool = True
    max_number: int
    created_at: float = 0.0
    api_version: str = "v1"


class CardsResponse(BaseModel):
    """All question cards."""
    cards: list[list[int]]
    max_number: int
    count: int


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
