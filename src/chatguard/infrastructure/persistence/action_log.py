"""Action log data access (bounded, in-memory).

Entries are kept oldest first and capped at ``limit``; the oldest entry is
dropped when the cap is exceeded. Writers are serialized by the engine.
Readers get an immutable snapshot that is swapped on every write, so reads
never block and never see a half-applied mutation.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List, Tuple

from ...domain.moderation.models import ActionType, ModAction

DEFAULT_LIMIT = 100


class ActionLog:
    def __init__(self, limit: int = DEFAULT_LIMIT):
        if limit < 1:
            raise ValueError("action log limit must be at least 1")
        self.limit = limit
        self._entries: Deque[ModAction] = deque(maxlen=limit)
        self._snapshot: Tuple[ModAction, ...] = ()

    def log_action(self, action: ModAction) -> ModAction:
        self._entries.append(action)
        self._snapshot = tuple(self._entries)
        return action

    def prune(self, cutoff: float) -> int:
        """Drop entries with ``timestamp <= cutoff``. Returns the number removed."""
        kept = [a for a in self._entries if a.timestamp > cutoff]
        removed = len(self._entries) - len(kept)
        if removed:
            self._entries = deque(kept, maxlen=self.limit)
            self._snapshot = tuple(self._entries)
        return removed

    def snapshot(self) -> Tuple[ModAction, ...]:
        return self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)

    def __iter__(self):
        return iter(self._snapshot)

    # -- queries (read the snapshot) -----------------------------------------

    def recent(self, limit: int = 20, offset: int = 0) -> List[ModAction]:
        """Newest first."""
        ordered = list(reversed(self._snapshot))
        start = max(0, offset)
        return ordered[start:start + max(0, limit)]

    def fetch_actions(
        self,
        user: str,
        limit: int = 20,
        since: float | None = None,
        types: Iterable[ActionType | str] | None = None,
        offset: int = 0,
    ) -> List[ModAction]:
        wanted = {ActionType(t) for t in types} if types else None
        rows = [
            a for a in reversed(self._snapshot)
            if a.user == user
            and (since is None or a.timestamp > since)
            and (wanted is None or a.type in wanted)
        ]
        start = max(0, offset)
        return rows[start:start + max(0, limit)]

    def aggregate_counts(self, since: float | None = None) -> Dict[ActionType, int]:
        counts: Dict[ActionType, int] = {t: 0 for t in ActionType}
        for a in self._snapshot:
            if since is None or a.timestamp > since:
                counts[a.type] += 1
        return counts


__all__ = ["ActionLog", "DEFAULT_LIMIT"]
