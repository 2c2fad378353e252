"""
Process-wide settings for lazyseq.

Settings only affect how pull bridges are opened; sequences never read them
at construction time.
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from lazyseq.models import BridgeStrategy

ENV_PREFIX = "LAZYSEQ_"


class Settings(BaseModel):
    """Validated configuration"""
    bridge: BridgeStrategy = Field(
        BridgeStrategy.AUTO,
        description="Default strategy used by open_pull()"
    )
    log_level: str = Field(
        "WARNING",
        description="Level applied by setup_logging() when none is given"
    )
    thread_name_prefix: str = Field(
        "lazyseq-pull",
        description="Name prefix for pull-bridge worker threads"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Accept any standard logging level name, case-insensitively"""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("thread_name_prefix")
    @classmethod
    def validate_thread_name_prefix(cls, v):
        if not v or not v.strip():
            raise ValueError("Thread name prefix cannot be empty")
        return v.strip()

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from LAZYSEQ_* environment variables."""
        environ = os.environ if environ is None else environ
        values = {}
        for field_name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + field_name.upper())
            if raw is not None:
                values[field_name] = raw.strip().lower() if field_name == "bridge" else raw
        return cls(**values)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(**overrides) -> Settings:
    """Replace the current settings with a validated copy carrying overrides."""
    global _settings
    merged = get_settings().model_dump()
    merged.update(overrides)
    _settings = Settings(**merged)
    return _settings


def reset_settings():
    """Forget configured settings so the environment is read again."""
    global _settings
    _settings = None
