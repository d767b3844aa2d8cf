"""Moderation pipeline orchestrator.

High-level responsibilities:
 1. Run the spam detector (which also records the message in user history).
 2. Run the link, banned word and toxicity evaluators.
 3. Pick exactly one action type from the flags by fixed precedence.
 4. Append the resulting action to the action log.

The pipeline holds no lock; the engine serializes calls into it.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from ..domain.moderation.history import UserHistoryTracker
from ..domain.moderation.models import (
    AUTOMOD,
    ActionType,
    ChatMessage,
    Flag,
    ModAction,
    ModerationVerdict,
)
from ..domain.moderation.rules import (
    DEFAULT_WEIGHTS,
    ToxicityWeights,
    check_banned_words,
    check_links,
    check_spam,
    is_toxic,
    score_toxicity,
)
from ..domain.policy.models import ToxicityAction, ToxicityPolicy
from ..domain.policy.store import PolicyStore
from ..infrastructure.logging.structured_logging import debug as log_debug, info as log_info
from ..infrastructure.persistence.action_log import ActionLog
from ..utils.format_utils import excerpt

_SEVERE = {Flag.BANNED_WORD.value, Flag.TOXIC_CONTENT.value}


def select_action(flags: Sequence[str], spam_flag_count: int, toxicity_policy: ToxicityPolicy) -> ActionType:
    """Map a non-empty flag set to one action type.

    Precedence: banned word / toxic content, then links, then heavy spam
    (more than two spam flags), then a plain warning.
    """
    if _SEVERE.intersection(flags):
        return ActionType.BAN if toxicity_policy.action == ToxicityAction.BAN else ActionType.TIMEOUT
    if Flag.CONTAINS_LINK.value in flags:
        return ActionType.DELETE
    if spam_flag_count > 2:
        return ActionType.TIMEOUT
    return ActionType.WARN


class DecisionPipeline:
    def __init__(
        self,
        store: PolicyStore,
        history: UserHistoryTracker,
        action_log: ActionLog,
        clock: Callable[[], float],
        weights: ToxicityWeights = DEFAULT_WEIGHTS,
    ):
        self.store = store
        self.history = history
        self.action_log = action_log
        self.clock = clock
        self.weights = weights

    def assess(self, message: ChatMessage) -> ModerationVerdict:
        settings = self.store.settings
        spam = check_spam(message, self.history, settings.spam_filter)
        flags: List[str] = list(spam)
        if check_links(message.message, settings.link_policy):
            flags.append(Flag.CONTAINS_LINK.value)
        if check_banned_words(message.message, settings.banned_words):
            flags.append(Flag.BANNED_WORD.value)
        toxicity = score_toxicity(message.message, settings.toxicity_filter, self.weights)
        if is_toxic(toxicity, settings.toxicity_filter):
            flags.append(Flag.TOXIC_CONTENT.value)

        if not flags:
            log_debug("moderation.no_match", user=message.user, toxicity=round(toxicity, 4), excerpt=excerpt(message.message, 60))
            return ModerationVerdict(toxicity=toxicity)

        kind = select_action(flags, len(spam), settings.toxicity_filter)
        action = ModAction.create(kind, message.user, ", ".join(flags), AUTOMOD, self.clock())
        self.action_log.log_action(action)
        log_info(
            "moderation.action",
            action=kind.value,
            user=message.user,
            flags=",".join(flags),
            toxicity=round(toxicity, 4),
        )
        return ModerationVerdict(flags=tuple(flags), spam_flags=tuple(spam), toxicity=toxicity, action=action)

    def evaluate(self, message: ChatMessage) -> Optional[ModAction]:
        return self.assess(message).action


__all__ = ["DecisionPipeline", "select_action"]
