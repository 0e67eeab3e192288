"""
Session Module - Manages ephemeral guessing sessions.

A session represents one player at one screen:
- Created in Idle (start screen)
- Runs any number of rounds (start, answer each card, reveal)
- Owns the reveal timer and cancels it on start/restart
- Dropped when ended; nothing is persisted
"""

from .manager import SessionManager, Session
from .scheduler import Scheduler, TimerHandle, AsyncioScheduler, ManualScheduler

__all__ = [
    "SessionManager",
    "Session",
    "Scheduler",
    "TimerHandle",
    "AsyncioScheduler",
    "ManualScheduler",
]
