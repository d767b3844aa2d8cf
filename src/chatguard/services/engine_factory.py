"""Engine factory: build a ModerationEngine from EngineConfig and its files."""
from __future__ import annotations

from typing import Any

from ..config.settings import EngineConfig, load_config
from ..domain.policy.loader import load_presets, load_settings
from ..engine import ModerationEngine
from ..infrastructure.logging.structured_logging import info as log_info


def build_engine(cfg: EngineConfig | None = None, **engine_kwargs: Any) -> ModerationEngine:
    """Load the optional settings / presets files named in ``cfg`` and build the engine.

    File errors propagate: a deployment with a broken settings file should
    fail at startup rather than run on defaults.
    """
    cfg = cfg or load_config()
    if cfg.settings_file and "settings" not in engine_kwargs:
        engine_kwargs["settings"] = load_settings(cfg.settings_file)
    if cfg.presets_file and "presets" not in engine_kwargs:
        engine_kwargs["presets"] = load_presets(cfg.presets_file)
    engine = ModerationEngine(cfg, **engine_kwargs)
    log_info(
        "engine.ready",
        settings_file=cfg.settings_file or "-",
        presets=",".join(engine.settings.presets()),
        active_preset=engine.settings.active_preset or "custom",
    )
    return engine


__all__ = ["build_engine"]
