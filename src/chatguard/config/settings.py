"""Engine configuration using Pydantic BaseSettings for validation & env loading.

Every tunable the engine uses lives here so deployments can adjust them
through ``CHATGUARD_*`` environment variables or a ``.env`` file:
 - window sizes, TTLs and bounds for the in-memory collections.
 - the toxicity heuristic word list and weights.
 - optional YAML files for initial settings and extra presets.
"""
from __future__ import annotations

from typing import Annotated, List, Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_TOXIC_WORDS = ["hate", "stupid", "dumb", "idiot", "trash"]


class EngineConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHATGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Maintenance
    sweep_interval_seconds: float = 60.0
    autostart_sweeper: bool = True

    # Bounds & windows
    user_history_limit: int = 10
    action_log_limit: int = 100
    action_ttl_seconds: int = 3600
    queue_ttl_seconds: int = 3600
    join_history_seconds: int = 120
    raid_window_seconds: int = 60
    raid_clear_joins: int = 10
    stats_window_seconds: int = 86400

    # Toxicity heuristic
    toxic_words: Annotated[List[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_TOXIC_WORDS))
    toxic_word_weight: float = 0.2
    toxic_caps_ratio: float = 0.7
    toxic_caps_weight: float = 0.3
    toxic_punctuation_weight: float = 0.2

    # Optional files
    settings_file: Optional[str] = None
    presets_file: Optional[str] = None

    @field_validator("log_level", mode="before")
    def _normalize_level(cls, v):  # noqa: D401
        return str(v or "INFO").upper()

    @field_validator("toxic_words", mode="before")
    def _split_words(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return [str(w).strip().lower() for w in (v or []) if str(w).strip()]

    @field_validator(
        "user_history_limit",
        "action_log_limit",
        "action_ttl_seconds",
        "queue_ttl_seconds",
        "join_history_seconds",
        "raid_window_seconds",
        "raid_clear_joins",
        "stats_window_seconds",
        mode="before",
    )
    def _coerce_non_negative(cls, v):
        try:
            iv = int(v)
        except (TypeError, ValueError):
            iv = 0
        if iv < 0:
            iv = 0
        return iv

    @model_validator(mode="after")
    def _validate_all(self):  # noqa: D401
        if self.user_history_limit < 1:
            raise ValueError("USER_HISTORY_LIMIT must be at least 1")
        if self.action_log_limit < 1:
            raise ValueError("ACTION_LOG_LIMIT must be at least 1")
        if self.sweep_interval_seconds <= 0:
            raise ValueError("SWEEP_INTERVAL_SECONDS must be positive")
        if self.raid_window_seconds > self.join_history_seconds:
            raise ValueError("RAID_WINDOW_SECONDS cannot exceed JOIN_HISTORY_SECONDS")
        return self


def load_config(**overrides) -> EngineConfig:
    return EngineConfig(**overrides)  # type: ignore[call-arg]


__all__ = ["EngineConfig", "load_config", "DEFAULT_TOXIC_WORDS"]
