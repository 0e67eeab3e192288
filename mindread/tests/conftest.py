"""
Pytest fixtures for Mindread tests.
"""

import pytest

from ..config import GameConfig
from ..engine_core.cards import answers_for
from ..session import SessionManager, Session, ManualScheduler
from ..api.service import APIService


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock; timers only fire on advance()."""
    return ManualScheduler()


@pytest.fixture
def manager(scheduler: ManualScheduler) -> SessionManager:
    """Session manager on the virtual clock."""
    return SessionManager(scheduler=scheduler, config=GameConfig(thinking_delay=1.8))


@pytest.fixture
def session(manager: SessionManager) -> Session:
    """A fresh session in Idle."""
    return manager.create_session()


@pytest.fixture
def thinking_session(session: Session) -> Session:
    """A session that answered every card for 42 and is waiting on the reveal."""
    session.start()
    for yes in answers_for(42):
        session.submit_answer(yes)
    return session


@pytest.fixture
def service(manager: SessionManager) -> APIService:
    """API service on the virtual clock."""
    return APIService(session_manager=manager)


@pytest.fixture
def client(service: APIService):
    """HTTP test client bound to the virtual-clock service."""
    from fastapi.testclient import TestClient
    from ..api.app import create_app

    with TestClient(create_app(service=service)) as test_client:
        yield test_client
