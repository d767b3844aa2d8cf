"""Q&A and giveaway queue.

Items live in one FIFO list tagged by type. Approved items survive the TTL
sweep. ``draw_giveaway_winner`` recomputes the eligible set (unapproved
giveaway entries) on every call, so callers serialized by the engine lock can
never draw the same entry twice.
"""
from __future__ import annotations

import random
from dataclasses import replace
from typing import List, Optional

from ..domain.moderation.models import SYSTEM, ActionType, ModAction, QueueItem, QueueItemType, new_id
from ..errors import NotFoundError, ValidationError
from ..infrastructure.logging.structured_logging import debug as log_debug, info as log_info
from ..infrastructure.persistence.action_log import ActionLog

GIVEAWAY_REASON = "🎉 Won the giveaway!"


def _kind(value: QueueItemType | str) -> QueueItemType:
    try:
        return QueueItemType(value)
    except ValueError:
        raise ValidationError(f"Unknown queue item type '{value}'") from None


class QueueManager:
    def __init__(self, action_log: ActionLog):
        self.action_log = action_log
        self._items: List[QueueItem] = []
        self._snapshot: tuple = ()

    def _publish(self):
        self._snapshot = tuple(self._items)

    def add(self, user: str, message: str, type: QueueItemType | str, now: float) -> QueueItem:  # noqa: A002
        item = QueueItem(id=new_id(), user=user, message=message, timestamp=now, type=_kind(type))
        self._items.append(item)
        self._publish()
        log_debug("queue.added", item_id=item.id, user=user, type=item.type.value)
        return replace(item)

    def get(self, item_id: str) -> QueueItem:
        for item in self._snapshot:
            if item.id == item_id:
                return replace(item)
        raise NotFoundError(f"Queue item '{item_id}' not found")

    def approve(self, item_id: str) -> bool:
        for item in self._items:
            if item.id == item_id:
                item.approved = True
                return True
        log_debug("queue.approve_missing", item_id=item_id)
        return False

    def remove(self, item_id: str) -> bool:
        before = len(self._items)
        self._items = [i for i in self._items if i.id != item_id]
        if len(self._items) == before:
            log_debug("queue.remove_missing", item_id=item_id)
            return False
        self._publish()
        return True

    def clear(self, type: QueueItemType | str | None = None) -> int:  # noqa: A002
        before = len(self._items)
        if type is None:
            self._items = []
        else:
            kind = _kind(type)
            self._items = [i for i in self._items if i.type != kind]
        self._publish()
        return before - len(self._items)

    def items(self, type: QueueItemType | str | None = None) -> List[QueueItem]:  # noqa: A002
        if type is None:
            return [replace(i) for i in self._snapshot]
        kind = _kind(type)
        return [replace(i) for i in self._snapshot if i.type == kind]

    def _eligible(self) -> List[QueueItem]:
        return [i for i in self._items if i.type == QueueItemType.GIVEAWAY and not i.approved]

    def draw_giveaway_winner(self, rng: random.Random, now: float) -> Optional[QueueItem]:
        entries = self._eligible()
        if not entries:
            return None
        winner = entries[rng.randrange(len(entries))]
        winner.approved = True
        self.action_log.log_action(ModAction.create(ActionType.WARN, winner.user, GIVEAWAY_REASON, SYSTEM, now))
        log_info("queue.giveaway_winner", item_id=winner.id, user=winner.user, entries=len(entries))
        return replace(winner)

    def prune(self, cutoff: float) -> int:
        """Drop unapproved items with ``timestamp <= cutoff``."""
        before = len(self._items)
        self._items = [i for i in self._items if i.timestamp > cutoff or i.approved]
        removed = before - len(self._items)
        if removed:
            self._publish()
        return removed

    def __len__(self) -> int:
        return len(self._snapshot)


__all__ = ["QueueManager", "GIVEAWAY_REASON"]
