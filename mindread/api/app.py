"""
FastAPI Application - REST API for a guessing front end.

Endpoints:
    GET    /api/v1/cards                   The question cards
    POST   /api/v1/sessions                Create session (starts in idle)
    GET    /api/v1/sessions                List sessions
    GET    /api/v1/sessions/{id}           Get session snapshot
    DELETE /api/v1/sessions/{id}           End session
    POST   /api/v1/sessions/{id}/start     Start a round
    POST   /api/v1/sessions/{id}/answer    Answer the current card
    POST   /api/v1/sessions/{id}/restart   Back to the start screen
    WS     /api/v1/sessions/{id}/ws        Snapshot on every change

Reveal Flow:
    1. The last POST /answer returns phase=thinking
    2. After the thinking delay the server moves the session to revealed
    3. WebSocket clients get the revealed snapshot pushed;
       REST clients see it on their next GET

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import asyncio
import json
import logging
import os

from fastapi import FastAPI, Body, Request, WebSocket
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import GameConfig
from ..session import SessionManager, AsyncioScheduler
from .service import APIService
from .schemas import (
    CreateSessionRequest,
    AnswerRequest,
    SessionResponse,
    CardsResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
MINDREAD_ENV = os.getenv("MINDREAD_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates one from the
            environment config on the running event loop if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Mindread API",
        description="""
Binary mind-reading number guessing game.

Think of a number, answer one yes/no question per card,
and the server reveals the number after a short "thinking" pause.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_TRANSITION` | Operation not allowed in the current phase |
| `VALIDATION_ERROR` | Malformed request |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        session_manager=SessionManager(
            scheduler=AsyncioScheduler(),
            config=GameConfig.from_env(),
        )
    )
    app.state.service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def to_http(response: Union[SessionResponse, ErrorResponse]):
        """Map service results to HTTP: 404 for missing, 409 for bad transitions."""
        if isinstance(response, ErrorResponse):
            status_code = 404 if response.error_code == ErrorCode.SESSION_NOT_FOUND else 409
            return make_error_response(
                response.error_code,
                response.error,
                status_code=status_code,
                details=response.details,
            )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    # =========================================================================
    # Cards Endpoint
    # =========================================================================

    @app.get(
        "/api/v1/cards",
        response_model=CardsResponse,
        tags=["Cards"],
        summary="Get the question cards",
    )
    async def get_cards() -> CardsResponse:
        """Every card, least-significant bit first."""
        return api_service.get_cards()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(
        body: Annotated[Optional[CreateSessionRequest], Body()] = None,
    ) -> SessionResponse:
        """
        Create a new session on the start screen.

        Set `auto_start=true` to go straight to the first card.
        """
        return api_service.create_session(body)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session snapshot",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current phase, card and (once revealed) result."""
        return to_http(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a session, cancel its timer and disconnect its WebSockets."""
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Round Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/start",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Start a round",
    )
    async def start_round(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Show the first card. Throws away any round in progress."""
        return to_http(api_service.start(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/answer",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Answer the current card",
    )
    async def answer(
        session_id: str,
        body: AnswerRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Answer whether the number is on the current card.

        **Request Body:**
        ```json
        {"yes": true}
        ```

        The last answer moves the session to `thinking`.
        Answers outside `asking` are rejected with 409 and change nothing.
        """
        return to_http(api_service.answer(session_id, body.yes))

    @app.post(
        "/api/v1/sessions/{session_id}/restart",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Return to the start screen",
    )
    async def restart(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Cancel any pending reveal and go back to `idle`."""
        return to_http(api_service.restart(session_id))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Session changed (including the timed reveal)
        - pong: Reply to ping
        - error: Client message could not be parsed

        Messages from client:
        - ping: Keep-alive
        """
        session = api_service.session_manager.get_session(session_id)
        if not session:
            await websocket.close(code=4404)
            return

        await websocket.accept()

        queue: asyncio.Queue = asyncio.Queue()

        def on_change(changed):
            if changed.closed:
                queue.put_nowait(None)
                return
            queue.put_nowait(api_service.session_to_response(changed).model_dump(mode="json"))

        session.add_listener(on_change)
        logger.debug("WebSocket connected to session %s", session_id)

        receive_task = asyncio.ensure_future(websocket.receive())
        update_task = None
        try:
            await websocket.send_json({
                "type": "state_update",
                "payload": api_service.session_to_response(session).model_dump(mode="json"),
            })

            while True:
                update_task = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait(
                    {receive_task, update_task},
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if update_task in done:
                    payload = update_task.result()
                    if payload is None:
                        # Session ended (deleted or cleaned up)
                        await websocket.close()
                        break
                    await websocket.send_json({"type": "state_update", "payload": payload})
                else:
                    update_task.cancel()

                if receive_task in done:
                    message = receive_task.result()
                    if message["type"] == "websocket.disconnect":
                        break
                    await _handle_client_message(websocket, message.get("text"))
                    receive_task = asyncio.ensure_future(websocket.receive())
        finally:
            session.remove_listener(on_change)
            receive_task.cancel()
            if update_task is not None:
                update_task.cancel()
            logger.debug("WebSocket left session %s", session_id)

    async def _handle_client_message(websocket: WebSocket, data: Optional[str]):
        try:
            message = json.loads(data or "")
        except json.JSONDecodeError:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": "Invalid JSON"},
            })
            return

        if isinstance(message, dict) and message.get("type") == "ping":
            await websocket.send_json({"type": "pong"})

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="mindread",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Mindread API",
            "version": __version__,
            "env": MINDREAD_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn mindread.api.app:app
app = create_app()
