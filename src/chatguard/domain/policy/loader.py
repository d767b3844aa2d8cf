"""Settings & preset file loader (YAML; JSON is accepted as a YAML subset)."""
from __future__ import annotations

import os
from typing import Any, Dict

import yaml

from ...errors import ValidationError
from .models import ModSettings, SettingsPatch
from .store import coerce_patch, parse_settings


def read_yaml(path: str) -> Any:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in {path}: {e}") from e


def load_settings(path: str) -> ModSettings:
    raw = read_yaml(path)
    if raw is None:
        raise ValidationError(f"Settings file is empty: {path}")
    return parse_settings(raw)


def load_presets(path: str) -> Dict[str, SettingsPatch]:
    raw = read_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ValidationError(f"Presets file must map preset names to settings: {path}")
    presets: Dict[str, SettingsPatch] = {}
    for name, body in raw.items():
        if not isinstance(body, dict):
            raise ValidationError(f"Preset '{name}' must be a mapping")
        try:
            presets[str(name)] = coerce_patch(body)
        except ValidationError as e:
            raise ValidationError(f"Invalid preset '{name}': {e}", errors=e.errors) from e
    return presets


__all__ = ['load_settings', 'load_presets', 'read_yaml']
