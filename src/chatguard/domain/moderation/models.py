"""Data models for chat messages, moderation actions and queue items."""
from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

AUTOMOD = "AutoMod"
RAID_GUARD = "RaidGuard"
SYSTEM = "System"


def new_id() -> str:
    return uuid.uuid4().hex


class ActionType(str, Enum):
    TIMEOUT = "timeout"
    BAN = "ban"
    WARN = "warn"
    DELETE = "delete"


class QueueItemType(str, Enum):
    QUESTION = "question"
    GIVEAWAY = "giveaway"


class Flag(str, Enum):
    FAST_MESSAGING = "fast_messaging"
    REPEATED_MESSAGE = "repeated_message"
    EXCESSIVE_CAPS = "excessive_caps"
    EMOTE_SPAM = "emote_spam"
    CONTAINS_LINK = "contains_link"
    BANNED_WORD = "banned_word"
    TOXIC_CONTENT = "toxic_content"


SPAM_FLAGS = frozenset({
    Flag.FAST_MESSAGING.value,
    Flag.REPEATED_MESSAGE.value,
    Flag.EXCESSIVE_CAPS.value,
    Flag.EMOTE_SPAM.value,
})


@dataclass(frozen=True)
class ChatMessage:
    id: str
    user: str
    message: str
    timestamp: float
    flagged: bool = False
    flags: Tuple[str, ...] = ()

    @classmethod
    def create(cls, user: str, message: str, timestamp: float | None = None) -> "ChatMessage":
        return cls(id=new_id(), user=user, message=message, timestamp=time.time() if timestamp is None else timestamp)


@dataclass(frozen=True)
class ModAction:
    id: str
    type: ActionType
    user: str
    reason: str
    moderator: str
    timestamp: float

    @classmethod
    def create(cls, type: ActionType | str, user: str, reason: str, moderator: str, timestamp: float) -> "ModAction":  # noqa: A002
        return cls(id=new_id(), type=ActionType(type), user=user, reason=reason, moderator=moderator, timestamp=timestamp)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass
class QueueItem:
    id: str
    user: str
    message: str
    timestamp: float
    type: QueueItemType
    approved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class ModerationVerdict:
    """Outcome of running every rule evaluator over one message."""
    flags: Tuple[str, ...] = ()
    spam_flags: Tuple[str, ...] = ()
    toxicity: float = 0.0
    action: Optional[ModAction] = None

    @property
    def flagged(self) -> bool:
        return bool(self.flags)


@dataclass
class RaidState:
    is_raid_mode: bool = False
    slow_mode_delay_seconds: int = 0
    mitigation: Optional[str] = None

    def copy(self) -> "RaidState":
        return RaidState(self.is_raid_mode, self.slow_mode_delay_seconds, self.mitigation)


@dataclass(frozen=True)
class EngineStats:
    total_actions: int
    last_24h_actions: int
    timeouts: int
    bans: int
    warnings: int
    deletions: int
    queue_size: int
    questions_in_queue: int
    giveaway_entries: int
    is_raid_mode: bool
    slow_mode_delay: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalActions": self.total_actions,
            "last24hActions": self.last_24h_actions,
            "timeouts": self.timeouts,
            "bans": self.bans,
            "warnings": self.warnings,
            "deletions": self.deletions,
            "queueSize": self.queue_size,
            "questionsInQueue": self.questions_in_queue,
            "giveawayEntries": self.giveaway_entries,
            "isRaidMode": self.is_raid_mode,
            "slowModeDelay": self.slow_mode_delay,
        }


__all__ = [
    'ActionType', 'QueueItemType', 'Flag', 'SPAM_FLAGS',
    'ChatMessage', 'ModAction', 'QueueItem', 'ModerationVerdict', 'RaidState', 'EngineStats',
    'AUTOMOD', 'RAID_GUARD', 'SYSTEM', 'new_id',
]
