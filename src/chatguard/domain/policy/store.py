"""Policy store: current settings, presets and the active-preset marker.

The store is not thread-safe on its own; the engine serializes access.
Every mutation validates the complete result before swapping it in, so a
rejected patch or import leaves the previous settings untouched.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pydantic

from ...errors import NotFoundError, ValidationError
from ...infrastructure.logging.structured_logging import info as log_info, debug as log_debug
from .models import ModSettings, SettingsPatch
from .presets import BUILTIN_PRESETS, DEFAULT_SETTINGS

PatchLike = Union[SettingsPatch, Mapping[str, Any]]


def _error_summary(exc: pydantic.ValidationError) -> List[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]


def coerce_patch(patch: PatchLike) -> SettingsPatch:
    if isinstance(patch, SettingsPatch):
        return patch
    try:
        return SettingsPatch.model_validate(patch)
    except pydantic.ValidationError as e:
        errors = _error_summary(e)
        raise ValidationError("Invalid settings patch: " + "; ".join(errors), errors=errors) from e


def parse_settings(data: Union[str, bytes, Mapping[str, Any]]) -> ModSettings:
    """Parse a complete settings payload (JSON text or mapping)."""
    if isinstance(data, (str, bytes)):
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            data = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValidationError(f"Settings payload is not valid JSON: {e}") from e
    if not isinstance(data, Mapping):
        raise ValidationError("Settings payload must be an object")
    try:
        return ModSettings.model_validate(dict(data))
    except pydantic.ValidationError as e:
        errors = _error_summary(e)
        raise ValidationError("Invalid settings: " + "; ".join(errors), errors=errors) from e


class PolicyStore:
    def __init__(self, initial: ModSettings | None = None, presets: Mapping[str, SettingsPatch] | None = None):
        self._presets: Dict[str, SettingsPatch] = dict(BUILTIN_PRESETS)
        if presets:
            self._presets.update(presets)
        self._settings: ModSettings = initial or DEFAULT_SETTINGS
        self._active_preset: Optional[str] = None
        self._refresh_active_preset()

    @property
    def settings(self) -> ModSettings:
        return self._settings

    @property
    def active_preset(self) -> Optional[str]:
        return self._active_preset

    def presets(self) -> List[str]:
        return list(self._presets)

    def preset(self, name: str) -> SettingsPatch:
        try:
            return self._presets[name]
        except KeyError:
            raise NotFoundError(f"Unknown preset '{name}'") from None

    def update(self, patch: PatchLike) -> ModSettings:
        sp = coerce_patch(patch)
        self._settings = self._merge(sp)
        self._refresh_active_preset()
        log_debug("settings.updated", blocks=",".join(sp.model_dump(exclude_unset=True)), preset=self._active_preset)
        return self._settings

    def apply_preset(self, name: str) -> ModSettings:
        sp = self.preset(name)
        self._settings = self._merge(sp)
        self._active_preset = name
        log_info("settings.preset_applied", preset=name)
        return self._settings

    def reset(self) -> ModSettings:
        self._settings = DEFAULT_SETTINGS
        self._refresh_active_preset()
        log_info("settings.reset")
        return self._settings

    def export_settings(self) -> str:
        return json.dumps(self._settings.to_payload(), indent=2)

    def import_settings(self, data: Union[str, bytes, Mapping[str, Any]]) -> ModSettings:
        self._settings = parse_settings(data)
        self._refresh_active_preset()
        log_info("settings.imported", preset=self._active_preset)
        return self._settings

    def _merge(self, patch: SettingsPatch) -> ModSettings:
        try:
            return self._settings.merged(patch)
        except pydantic.ValidationError as e:
            errors = _error_summary(e)
            raise ValidationError("Invalid settings patch: " + "; ".join(errors), errors=errors) from e

    def _matching_presets(self) -> Iterable[str]:
        return (name for name, patch in self._presets.items() if self._settings.satisfies(patch))

    def _refresh_active_preset(self):
        if self._active_preset and self._active_preset in self._presets:
            if self._settings.satisfies(self._presets[self._active_preset]):
                return
        self._active_preset = next(iter(self._matching_presets()), None)


__all__ = ["PolicyStore", "PatchLike", "coerce_patch", "parse_settings"]
