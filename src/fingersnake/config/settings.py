"""Configuration management for fingersnake.

Loads settings from a YAML configuration file with environment variable
overrides for sensitive values (API keys). Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/fingersnake.yaml")
DEFAULT_LIVE_MODEL = "gemini-2.5-flash-native-audio-preview-09-2025"


class CaptureConfig(BaseModel):
    device_index: int = Field(default=0, description="OpenCV camera device index")
    frame_rate: float = Field(default=2.0, gt=0, description="Frames per second sent to the session")
    jpeg_quality: float = Field(default=0.5, gt=0, le=1.0)
    resolution_width: int = Field(default=320, gt=0)
    resolution_height: int = Field(default=240, gt=0)


class SessionConfig(BaseModel):
    model: str = Field(default=DEFAULT_LIVE_MODEL)
    system_prompt_override: str | None = Field(default=None)
    mirror_x: bool = Field(default=True, description="Mirror tracked x to match the mirrored preview")


class GameConfig(BaseModel):
    width: int = Field(default=960, gt=0)
    height: int = Field(default=640, gt=0)
    fps: int = Field(default=60, gt=0)
    speed: float = Field(default=3.0, gt=0, description="Head movement per tick")
    turn_rate: float = Field(default=0.15, gt=0, le=1.0)
    deadband: float = Field(default=10.0, ge=0)
    segment_spacing: float = Field(default=10.0, gt=0)
    initial_length: int = Field(default=10, gt=0)
    pickup_radius: float = Field(default=20.0, gt=0)
    food_margin: float = Field(default=20.0, ge=0)
    growth_segments: int = Field(default=5, gt=0)
    growth_score: int = Field(default=10, gt=0)
    liveness_timeout: float = Field(default=2.0, gt=0, description="Seconds before a tracked signal is stale")
    wander_probability: float = Field(default=0.02, ge=0, le=1.0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the fingersnake system.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "FINGERSNAKE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    gemini_api_key: SecretStr = Field(default=SecretStr(""))

    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    game: GameConfig = Field(default_factory=GameConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY", "")
    live_model = os.environ.get("GEMINI_MODEL", "")

    if api_key:
        yaml_data["gemini_api_key"] = api_key

    if live_model:
        if not isinstance(yaml_data.get("session"), dict):
            yaml_data["session"] = {}
        yaml_data["session"]["model"] = live_model
