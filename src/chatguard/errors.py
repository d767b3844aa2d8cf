"""Engine error taxonomy.

Nothing in the engine performs I/O, so there is no transient failure class:
 - ValidationError: malformed settings payloads (patch, import, YAML file).
 - NotFoundError: lookups of unknown presets or queue items.
Mutating queue operations on unknown ids are no-ops and never raise.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base class for chatguard errors."""


class ValidationError(EngineError, ValueError):
    def __init__(self, message: str, *, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(EngineError, LookupError):
    pass


__all__ = ["EngineError", "ValidationError", "NotFoundError"]
