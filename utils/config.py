"""Configuration management for TypeCoach."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

log = logging.getLogger("typecoach.config")


class AppSettings(BaseModel):
    """Application settings with validation."""

    # Session settings
    session_seconds: int = Field(
        default=60, gt=0, description="Time budget for one practice session (sec)"
    )
    target_word_count: int = Field(
        default=90, ge=10, description="Number of words in each practice text"
    )
    max_word_length: int = Field(
        default=10, ge=5, le=20, description="Longest word kept in practice text"
    )

    # Scoring and aggregation
    max_struggling_keys: int = Field(
        default=5, ge=1, description="Weak keys reported per session"
    )
    profile_struggling_keys: int = Field(
        default=8, ge=1, description="Weak keys kept across sessions"
    )
    recent_errors_limit: int = Field(
        default=50, ge=1, description="Mistyped characters kept in the profile"
    )
    high_accuracy_threshold: int = Field(
        default=95,
        ge=0,
        le=100,
        description="Accuracy at which the fallback insight praises the user",
    )

    # Ollama settings
    ollama_host: str = Field(default="localhost", description="Ollama server host")
    ollama_port: int = Field(
        default=11434, gt=0, le=65535, description="Ollama server port"
    )
    ollama_model: str = Field(default="gemma2:2b", description="Model for generation")
    ollama_timeout_sec: float = Field(
        default=30.0, gt=0, description="Timeout for each Ollama request (sec)"
    )

    # Prefetch
    prefetch_enabled: bool = Field(
        default=True, description="Fetch the next text while reviewing results"
    )

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @field_validator("profile_struggling_keys")
    @classmethod
    def validate_profile_keys(cls, v, info):
        """Validate interdependent field relationships."""
        if "max_struggling_keys" in info.data and v < info.data["max_struggling_keys"]:
            raise ValueError(
                f"profile_struggling_keys ({v}) must be at least "
                f"max_struggling_keys ({info.data['max_struggling_keys']})"
            )
        return v


def default_config_path() -> Path:
    """Settings file under the XDG config directory."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))
    return Path(xdg_config_home) / "typecoach" / "settings.json"


class Config:
    """Configuration manager using a JSON file with Pydantic validation.

    Only preferences are stored; practice history is never written to disk.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize config, loading the settings file if it exists.

        Args:
            path: Settings file, None for in-memory settings only
        """
        self.path = path
        self._values: dict[str, Any] = AppSettings().model_dump()
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Merge values from the settings file, skipping invalid ones."""
        try:
            stored = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            log.warning(f"Cannot read settings file {self.path}: {e}")
            return

        if not isinstance(stored, dict):
            log.warning(f"Ignoring settings file {self.path}: not a JSON object")
            return

        for key, value in stored.items():
            try:
                self._values[key] = self._validate(key, value)
            except ValueError as e:
                log.warning(f"Ignoring stored setting: {e}")

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2, sort_keys=True))

    def _validate(self, key: str, value: Any) -> Any:
        """Validate a single value through AppSettings if the key is known."""
        if key not in AppSettings.model_fields:
            return value
        try:
            validated = AppSettings(**{**self._values, key: value})
        except ValidationError as e:
            raise ValueError(f"Invalid value for {key}: {e}")
        return getattr(validated, key)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Get configuration value.

        Args:
            key: Setting key
            default: Default value if not found

        Returns:
            Setting value
        """
        if key in self._values:
            return self._values[key]
        return default

    def get_int(self, key: str, default: Optional[int] = None) -> int:
        """Get integer configuration value."""
        value = self.get(key, default)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        try:
            return int(value)
        except (ValueError, TypeError):
            settings = AppSettings()
            if hasattr(settings, key):
                return getattr(settings, key)
            return default if default is not None else 0

    def get_bool(self, key: str, default: Optional[bool] = None) -> bool:
        """Get boolean configuration value."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return bool(value)
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return bool(value) if value else False

    def set(self, key: str, value: Any) -> None:
        """Set configuration value with pydantic validation.

        Args:
            key: Setting key
            value: Setting value

        Raises:
            ValueError: If value fails validation
        """
        self._values[key] = self._validate(key, value)
        self._save()

    def get_all(self) -> dict[str, Any]:
        """Get all settings as dictionary."""
        return dict(self._values)

    def settings(self) -> AppSettings:
        """Current values as a validated AppSettings instance."""
        return AppSettings(**self._values)
