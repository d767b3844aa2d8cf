from __future__ import annotations

import re
from typing import List, Sequence

from ...policy.models import SpamFilterPolicy
from ..history import UserHistoryTracker
from ..models import ChatMessage, Flag

_UPPER_RE = re.compile(r"[A-Z]")
_LETTER_RE = re.compile(r"[A-Za-z]")
_EMOTE_RE = re.compile(r":\w+:")


def caps_percentage(text: str) -> float | None:
    letters = len(_LETTER_RE.findall(text))
    if letters == 0:
        return None
    return len(_UPPER_RE.findall(text)) / letters * 100


def count_emotes(text: str) -> int:
    return len(_EMOTE_RE.findall(text))


def spam_flags(message: ChatMessage, prior: Sequence[ChatMessage], policy: SpamFilterPolicy) -> List[str]:
    """Flags for ``message`` given the sender's earlier messages (oldest first)."""
    flags: List[str] = []
    if prior:
        gap = message.timestamp - prior[-1].timestamp
        if gap < policy.min_interval:
            flags.append(Flag.FAST_MESSAGING.value)

    recent = prior[-policy.max_repeats:]
    repeats = sum(1 for m in recent if m.message == message.message)
    if repeats >= policy.max_repeats - 1:
        flags.append(Flag.REPEATED_MESSAGE.value)

    pct = caps_percentage(message.message)
    if pct is not None and pct > policy.caps_threshold:
        flags.append(Flag.EXCESSIVE_CAPS.value)

    if count_emotes(message.message) > policy.emote_limit:
        flags.append(Flag.EMOTE_SPAM.value)
    return flags


def check_spam(message: ChatMessage, history: UserHistoryTracker, policy: SpamFilterPolicy) -> List[str]:
    """Evaluate then record ``message``.

    The message is appended to the sender's history even when the filter is
    disabled; ``enabled`` only controls whether flags are reported.
    """
    prior = history.history(message.user)
    flags = spam_flags(message, prior, policy) if policy.enabled else []
    history.record(message.user, message)
    return flags


__all__ = ["check_spam", "spam_flags", "caps_percentage", "count_emotes"]
