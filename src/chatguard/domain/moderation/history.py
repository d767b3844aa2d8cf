"""Bounded in-memory history used by the spam detector and raid guard."""
from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Tuple

from .models import ChatMessage

DEFAULT_USER_HISTORY = 10


class UserHistoryTracker:
    """Per-user ring of the most recent messages, oldest evicted first."""

    def __init__(self, limit: int = DEFAULT_USER_HISTORY):
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.limit = limit
        self._by_user: Dict[str, Deque[ChatMessage]] = {}

    def record(self, user: str, message: ChatMessage):
        ring = self._by_user.get(user)
        if ring is None:
            ring = self._by_user[user] = deque(maxlen=self.limit)
        ring.append(message)

    def history(self, user: str) -> Tuple[ChatMessage, ...]:
        return tuple(self._by_user.get(user, ()))

    def __len__(self) -> int:
        return len(self._by_user)


class JoinHistoryTracker:
    """Join timestamps kept for a rolling window (seconds)."""

    def __init__(self, window_seconds: float = 120):
        self.window_seconds = window_seconds
        self._joins: List[float] = []

    def record(self, now: float):
        self._joins.append(now)
        self.prune(now)

    def prune(self, now: float):
        cutoff = now - self.window_seconds
        self._joins = [t for t in self._joins if t > cutoff]

    def count_within(self, now: float, seconds: float) -> int:
        return sum(1 for t in self._joins if now - t < seconds)

    def __len__(self) -> int:
        return len(self._joins)


__all__ = ["UserHistoryTracker", "JoinHistoryTracker", "DEFAULT_USER_HISTORY"]
