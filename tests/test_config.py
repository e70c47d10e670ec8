"""Tests for press configuration."""

import json

import pytest
from pydantic import ValidationError

from manuscript_press.config import PressConfig


class TestPressConfig:
    """Tests for PressConfig."""

    def test_defaults(self):
        """Defaults match the published cost schedule and retry policy."""
        config = PressConfig()

        assert config.costs.isbn_single == 125
        assert config.costs.isbn_10pack == 295
        assert config.costs.copyright_registration == 65
        assert config.costs.cover_generation == 0.40
        assert config.retry.attempts == 3
        assert config.phase_timeout == 300
        assert config.cover_service is None
        assert (config.cover.width, config.cover.height, config.cover.dpi) == (1600, 2560, 300)

    def test_from_file_none(self):
        """No path gives the defaults."""
        assert PressConfig.from_file(None) == PressConfig()

    def test_from_file(self, tmp_path):
        """Partial files override only the given fields."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "costs": {"isbn_single": 99},
            "retry": {"attempts": 5},
            "cover_service": {"base_url": "https://covers.example.org"},
        }))

        config = PressConfig.from_file(path)

        assert config.costs.isbn_single == 99
        assert config.costs.copyright_registration == 65
        assert config.retry.attempts == 5
        assert config.cover_service["base_url"] == "https://covers.example.org"

    def test_invalid_values_rejected(self):
        """Zero attempts and non-positive timeouts are rejected."""
        with pytest.raises(ValidationError):
            PressConfig(retry={"attempts": 0})
        with pytest.raises(ValidationError):
            PressConfig(phase_timeout=0)
