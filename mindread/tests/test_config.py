"""
Tests for configuration loading.
"""

import pytest

from ..config import GameConfig, parse_phases, DEFAULT_THINKING_DELAY
from ..engine_core.state import Phase


class TestGameConfig:
    """Tests for GameConfig."""

    def test_defaults(self):
        config = GameConfig.from_env({})

        assert config.bits == 6
        assert config.max_number == 63
        assert config.thinking_delay == DEFAULT_THINKING_DELAY
        assert config.restart_phases == frozenset(Phase)

    def test_from_env(self):
        config = GameConfig.from_env({
            "MINDREAD_BITS": "4",
            "MINDREAD_THINKING_DELAY": "0.25",
            "MINDREAD_RESTART_PHASES": "idle, revealed",
        })

        assert config.bits == 4
        assert config.max_number == 15
        assert config.thinking_delay == 0.25
        assert config.restart_phases == frozenset({Phase.IDLE, Phase.REVEALED})

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            GameConfig(thinking_delay=-1.0)

    def test_zero_bits_rejected(self):
        with pytest.raises(ValueError):
            GameConfig(bits=0)

    def test_malformed_env_rejected(self):
        with pytest.raises(ValueError):
            GameConfig.from_env({"MINDREAD_BITS": "six"})


class TestParsePhases:
    """Tests for phase list parsing."""

    def test_case_and_spaces(self):
        assert parse_phases(" Thinking ,ASKING") == frozenset({Phase.THINKING, Phase.ASKING})

    def test_empty_disables_all(self):
        assert parse_phases("") == frozenset()

    def test_unknown_phase(self):
        with pytest.raises(ValueError, match="Unknown phase"):
            parse_phases("idle,sleeping")
