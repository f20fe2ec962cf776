"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fingersnake.config.settings import (
    DEFAULT_LIVE_MODEL,
    CaptureConfig,
    GameConfig,
    Settings,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from the developer's environment and .env file."""
    for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "GEMINI_MODEL", "FINGERSNAKE_GEMINI_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_default_settings(self) -> None:
        """Default Settings should be valid."""
        settings = Settings()
        assert settings.capture.device_index == 0
        assert settings.capture.frame_rate == 2.0
        assert settings.session.model == DEFAULT_LIVE_MODEL
        assert settings.session.mirror_x is True
        assert settings.gemini_api_key.get_secret_value() == ""

    def test_game_config_defaults(self) -> None:
        config = GameConfig()
        assert (config.width, config.height, config.fps) == (960, 640, 60)
        assert config.speed == 3.0
        assert config.turn_rate == 0.15
        assert config.deadband == 10.0
        assert config.segment_spacing == 10.0
        assert config.pickup_radius == 20.0
        assert config.growth_segments == 5
        assert config.growth_score == 10
        assert config.liveness_timeout == 2.0
        assert config.wander_probability == 0.02

    def test_capture_config_defaults(self) -> None:
        config = CaptureConfig()
        assert config.jpeg_quality == 0.5
        assert (config.resolution_width, config.resolution_height) == (320, 240)

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CaptureConfig(frame_rate=0)
        with pytest.raises(ValidationError):
            GameConfig(turn_rate=1.5)
        with pytest.raises(ValidationError):
            GameConfig(wander_probability=-0.1)

    def test_api_key_is_secret(self) -> None:
        settings = Settings(gemini_api_key="abc123")
        assert "abc123" not in repr(settings)
        assert settings.gemini_api_key.get_secret_value() == "abc123"


class TestLoadSettings:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.game.width == 960

    def test_yaml_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "game:\n"
            "  width: 800\n"
            "  speed: 4.5\n"
            "capture:\n"
            "  frame_rate: 1.0\n"
            "session:\n"
            "  mirror_x: false\n"
        )
        settings = load_settings(path)
        assert settings.game.width == 800
        assert settings.game.speed == 4.5
        assert settings.game.height == 640
        assert settings.capture.frame_rate == 1.0
        assert settings.session.mirror_x is False

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).capture.device_index == 0

    def test_api_key_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.gemini_api_key.get_secret_value() == "from-env"

    def test_google_api_key_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.gemini_api_key.get_secret_value() == "google-key"

    def test_model_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_MODEL", "gemini-live-test")
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.session.model == "gemini-live-test"

    def test_environment_wins_over_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_MODEL", "gemini-live-test")
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        path = tmp_path / "config.yaml"
        path.write_text("gemini_api_key: yaml-key\nsession:\n  model: pinned-model\n  mirror_x: false\n")
        settings = load_settings(path)
        assert settings.session.model == "gemini-live-test"
        assert settings.session.mirror_x is False
        assert settings.gemini_api_key.get_secret_value() == "env-key"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # Registered with monkeypatch so the value loaded from .env is undone.
        monkeypatch.setenv("GEMINI_API_KEY", "")
        (tmp_path / ".env").write_text("# comment\nGEMINI_API_KEY=dotenv-key\n")
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.gemini_api_key.get_secret_value() == "dotenv-key"
