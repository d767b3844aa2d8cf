"""Raid detection service.

Pure function core for the threshold and mitigation decisions, wrapped by
``RaidGuard`` which owns the join history and the raid state. Raid mode is
only ever switched on here; clearing it is the maintenance sweeper's job.
"""
from __future__ import annotations

from typing import Callable, Optional

from ..domain.moderation.history import JoinHistoryTracker
from ..domain.moderation.models import RAID_GUARD, SYSTEM, ActionType, ModAction, RaidState
from ..domain.policy.models import RaidAction, RaidGuardPolicy
from ..infrastructure.logging.structured_logging import info as log_info, warning as log_warning
from ..infrastructure.persistence.action_log import ActionLog

RAID_REASON = "Raid detected! Activating protection mode."

# subOnly carries no delay; the external enforcer reads the mitigation flag.
MITIGATION_DELAYS = {
    RaidAction.SLOW_MODE: 10,
    RaidAction.LOCKDOWN: 30,
}


def is_raid(recent_joins: int, policy: RaidGuardPolicy) -> bool:
    return policy.enabled and recent_joins > policy.threshold


def mitigation_delay(action: RaidAction, current_delay: int) -> int:
    return MITIGATION_DELAYS.get(action, current_delay)


class RaidGuard:
    def __init__(
        self,
        joins: JoinHistoryTracker,
        action_log: ActionLog,
        policy: Callable[[], RaidGuardPolicy],
        window_seconds: float = 60,
        clear_below: int = 10,
    ):
        self.joins = joins
        self.action_log = action_log
        self._policy = policy
        self.window_seconds = window_seconds
        self.clear_below = clear_below
        self.state = RaidState()

    def record_join(self, now: float) -> Optional[ModAction]:
        self.joins.record(now)
        recent = self.joins.count_within(now, self.window_seconds)
        policy = self._policy()
        if not is_raid(recent, policy):
            return None
        was_raid = self.state.is_raid_mode
        self.state.is_raid_mode = True
        self.state.mitigation = policy.action.value
        self.state.slow_mode_delay_seconds = mitigation_delay(policy.action, self.state.slow_mode_delay_seconds)
        action = ModAction.create(ActionType.WARN, SYSTEM, RAID_REASON, RAID_GUARD, now)
        self.action_log.log_action(action)
        if not was_raid:
            log_warning(
                "raid.detected",
                recent_joins=recent,
                threshold=policy.threshold,
                mitigation=policy.action.value,
                slow_mode_delay=self.state.slow_mode_delay_seconds,
            )
        return action

    def should_clear(self, now: float) -> bool:
        if not self.state.is_raid_mode:
            return False
        return self.joins.count_within(now, self.joins.window_seconds) < self.clear_below

    def clear(self):
        self.state.is_raid_mode = False
        self.state.slow_mode_delay_seconds = 0
        self.state.mitigation = None
        log_info("raid.cleared")


__all__ = ["RaidGuard", "is_raid", "mitigation_delay", "RAID_REASON", "MITIGATION_DELAYS"]
