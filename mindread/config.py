"""
Configuration - Game settings with environment overrides.

Environment variables:
    MINDREAD_BITS              Number of cards / binary digits (default 6)
    MINDREAD_THINKING_DELAY    Seconds between last answer and reveal (default 1.8)
    MINDREAD_RESTART_PHASES    Comma-separated phases where restart is allowed
                               (default: idle,asking,thinking,revealed)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import os

from .engine_core.cards import DEFAULT_BITS, max_number
from .engine_core.state import Phase
from .engine_core.reducer import ALL_PHASES

DEFAULT_THINKING_DELAY = 1.8


def parse_phases(value: str) -> frozenset[Phase]:
    """Parse 'idle,thinking' into a set of phases."""
    phases = set()
    for name in value.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            phases.add(Phase(name))
        except ValueError:
            valid = ", ".join(p.value for p in Phase)
            raise ValueError(f"Unknown phase '{name}' (valid: {valid})") from None
    return frozenset(phases)


@dataclass(frozen=True)
class GameConfig:
    """Settings for one guessing session."""
    bits: int = DEFAULT_BITS
    thinking_delay: float = DEFAULT_THINKING_DELAY
    restart_phases: frozenset[Phase] = field(default_factory=lambda: ALL_PHASES)

    def __post_init__(self):
        if self.bits < 1:
            raise ValueError(f"bits must be at least 1, got {self.bits}")
        if self.thinking_delay < 0:
            raise ValueError(f"thinking_delay must be >= 0, got {self.thinking_delay}")

    @property
    def max_number(self) -> int:
        return max_number(self.bits)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> GameConfig:
        """Build a config from MINDREAD_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ

        kwargs = {}
        if env.get("MINDREAD_BITS"):
            kwargs["bits"] = int(env["MINDREAD_BITS"])
        if env.get("MINDREAD_THINKING_DELAY"):
            kwargs["thinking_delay"] = float(env["MINDREAD_THINKING_DELAY"])
        if env.get("MINDREAD_RESTART_PHASES") is not None:
            kwargs["restart_phases"] = parse_phases(env["MINDREAD_RESTART_PHASES"])

        return cls(**kwargs)
