"""Configuration management for fingersnake.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for sensitive values like
API keys.
"""

from fingersnake.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
