"""
Mindread - Binary "mind-reading" number guessing engine.

The user silently picks a number; the engine shows a handful of cards and
asks "is your number on this card?" for each one. The yes/no answers are the
binary digits of the number, so the engine can reveal it after the last card.

The engine provides:
- Card generation (one card per binary digit)
- Answer accumulation
- A session state machine with a timed "thinking" pause
- REST/WebSocket and terminal adapters
"""

__version__ = "0.1.0"
