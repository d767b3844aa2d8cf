"""Public behavioral contracts for engine extension points."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import ModAction


@runtime_checkable
class Clock(Protocol):
    def __call__(self) -> float: ...  # noqa: D401,E701


@runtime_checkable
class ActionListener(Protocol):
    """External enforcement actor notified of every emitted action."""
    def __call__(self, action: ModAction) -> None: ...  # noqa: E701


__all__ = ["Clock", "ActionListener"]
