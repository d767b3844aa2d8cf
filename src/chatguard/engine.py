"""ModerationEngine: the single entry point for chat ingestion and moderator UIs.

Wires the policy store, history trackers, decision pipeline, raid guard,
queue and action log together behind one ``threading.RLock``. Every mutation
(messages, joins, queue edits, settings edits, sweeps, manual actions) runs
under that lock; action log and queue reads return snapshots without it.

Emitted actions are handed to registered listeners (the external enforcement
actor) after the lock is released. A listener failure is logged and does not
affect the engine or other listeners.
"""
from __future__ import annotations

import random
import threading
import time
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .config.settings import EngineConfig
from .domain.moderation.history import JoinHistoryTracker, UserHistoryTracker
from .domain.moderation.interfaces import ActionListener, Clock
from .domain.moderation.models import (
    ActionType,
    ChatMessage,
    EngineStats,
    ModAction,
    ModerationVerdict,
    QueueItem,
    QueueItemType,
    RaidState,
)
from .domain.moderation.rules import ToxicityWeights
from .domain.policy.models import ModSettings, SettingsPatch
from .domain.policy.store import PatchLike, PolicyStore
from .errors import EngineError
from .infrastructure.logging.structured_logging import error as log_error, info as log_info, warning as log_warning
from .infrastructure.persistence.action_log import ActionLog
from .services.maintenance import MaintenanceSweeper, SweepReport
from .services.moderation_pipeline import DecisionPipeline
from .services.queue_manager import QueueManager
from .services.raid_guard import RaidGuard


class EngineSettings:
    """Settings surface for moderator UIs. Failures are logged and reported as False."""

    def __init__(self, engine: "ModerationEngine"):
        self._engine = engine

    @property
    def active_preset(self) -> Optional[str]:
        return self._engine.store.active_preset

    def presets(self) -> List[str]:
        return self._engine.store.presets()

    def get(self) -> ModSettings:
        return self._engine.store.settings

    def update(self, patch: PatchLike) -> bool:
        with self._engine.lock:
            try:
                self._engine.store.update(patch)
            except EngineError as e:
                log_warning("settings.update_failed", error=str(e))
                return False
        return True

    def apply_preset(self, name: str) -> bool:
        with self._engine.lock:
            try:
                self._engine.store.apply_preset(name)
            except EngineError as e:
                log_warning("settings.preset_failed", preset=name, error=str(e))
                return False
        return True

    def reset(self) -> ModSettings:
        with self._engine.lock:
            return self._engine.store.reset()

    def export(self) -> str:
        return self._engine.store.export_settings()

    def import_(self, data: Union[str, bytes, Mapping[str, Any]]) -> bool:
        with self._engine.lock:
            try:
                self._engine.store.import_settings(data)
            except EngineError as e:
                log_warning("settings.import_failed", error=str(e))
                return False
        return True


class EngineQueue:
    """Q&A / giveaway queue surface. Unknown ids are no-ops."""

    def __init__(self, engine: "ModerationEngine"):
        self._engine = engine

    def add(self, user: str, message: str, type: QueueItemType | str) -> QueueItem:  # noqa: A002
        with self._engine.lock:
            return self._engine.queue_manager.add(user, message, type, self._engine.clock())

    def approve(self, item_id: str) -> bool:
        with self._engine.lock:
            return self._engine.queue_manager.approve(item_id)

    def remove(self, item_id: str) -> bool:
        with self._engine.lock:
            return self._engine.queue_manager.remove(item_id)

    def clear(self, type: QueueItemType | str | None = None) -> int:  # noqa: A002
        with self._engine.lock:
            return self._engine.queue_manager.clear(type)

    def draw_winner(self) -> Optional[QueueItem]:
        with self._engine.lock:
            last = self._engine._last_action()
            winner = self._engine.queue_manager.draw_giveaway_winner(self._engine.rng, self._engine.clock())
            emitted = self._engine._last_action()
        if winner is not None and emitted is not None and emitted is not last:
            self._engine._notify((emitted,))
        return winner

    def items(self, type: QueueItemType | str | None = None) -> List[QueueItem]:  # noqa: A002
        return self._engine.queue_manager.items(type)

    def get(self, item_id: str) -> QueueItem:
        return self._engine.queue_manager.get(item_id)

    def __len__(self) -> int:
        return len(self._engine.queue_manager)


class ModerationEngine:
    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        settings: ModSettings | None = None,
        presets: Mapping[str, SettingsPatch] | None = None,
        clock: Clock = time.time,
        rng: random.Random | None = None,
        listeners: Iterable[ActionListener] = (),
        start_sweeper: bool | None = None,
    ):
        self.config = config or EngineConfig()
        self.clock = clock
        self.rng = rng or random.Random()
        self.lock = threading.RLock()
        self._listeners: List[ActionListener] = list(listeners)

        cfg = self.config
        self.store = PolicyStore(settings, presets)
        self.history = UserHistoryTracker(cfg.user_history_limit)
        self.joins = JoinHistoryTracker(cfg.join_history_seconds)
        self.action_log_store = ActionLog(cfg.action_log_limit)
        self.pipeline = DecisionPipeline(
            self.store,
            self.history,
            self.action_log_store,
            clock,
            ToxicityWeights.from_config(cfg),
        )
        self.raid_guard = RaidGuard(
            self.joins,
            self.action_log_store,
            lambda: self.store.settings.raid_guard,
            window_seconds=cfg.raid_window_seconds,
            clear_below=cfg.raid_clear_joins,
        )
        self.queue_manager = QueueManager(self.action_log_store)
        self.sweeper = MaintenanceSweeper(self.sweep, cfg.sweep_interval_seconds)

        self.settings = EngineSettings(self)
        self.queue = EngineQueue(self)

        if cfg.autostart_sweeper if start_sweeper is None else start_sweeper:
            self.start()

    # -- lifecycle -------------------------------------------------------------

    def start(self):
        self.sweeper.start()

    def shutdown(self):
        self.sweeper.stop()
        log_info("engine.shutdown")

    def __enter__(self) -> "ModerationEngine":
        return self

    def __exit__(self, *exc):
        self.shutdown()
        return False

    # -- listeners ---------------------------------------------------------------

    def add_listener(self, listener: ActionListener):
        self._listeners.append(listener)

    def _last_action(self) -> Optional[ModAction]:
        snapshot = self.action_log_store.snapshot()
        return snapshot[-1] if snapshot else None

    def _notify(self, actions: Iterable[ModAction]):
        for action in actions:
            for listener in list(self._listeners):
                try:
                    listener(action)
                except Exception as e:  # noqa: BLE001
                    log_error("enforcement.listener_error", action_id=action.id, error=str(e))

    # -- inbound events ----------------------------------------------------------

    def assess_message(self, message: ChatMessage) -> ModerationVerdict:
        with self.lock:
            try:
                verdict = self.pipeline.assess(message)
            except Exception as e:  # noqa: BLE001
                log_error("moderation.error", user=message.user, message_id=message.id, error=str(e))
                return ModerationVerdict()
        if verdict.action is not None:
            self._notify((verdict.action,))
        return verdict

    def submit_message(self, message: ChatMessage) -> Optional[ModAction]:
        return self.assess_message(message).action

    def submit_join(self) -> Optional[ModAction]:
        with self.lock:
            action = self.raid_guard.record_join(self.clock())
        if action is not None:
            self._notify((action,))
        return action

    def record_action(self, type: ActionType | str, user: str, reason: str, moderator: str) -> ModAction:  # noqa: A002
        """Record a manual moderator action."""
        with self.lock:
            action = self.action_log_store.log_action(ModAction.create(type, user, reason, moderator, self.clock()))
        log_info("moderation.manual_action", action=action.type.value, user=user, moderator=moderator)
        self._notify((action,))
        return action

    # -- reads -----------------------------------------------------------------

    @property
    def action_log(self) -> Tuple[ModAction, ...]:
        """Oldest first."""
        return self.action_log_store.snapshot()

    def recent_actions(self, limit: int = 20) -> List[ModAction]:
        return self.action_log_store.recent(limit)

    def actions_for(self, user: str, limit: int = 20) -> List[ModAction]:
        return self.action_log_store.fetch_actions(user, limit=limit)

    @property
    def raid_state(self) -> RaidState:
        with self.lock:
            return self.raid_guard.state.copy()

    def stats(self) -> EngineStats:
        now = self.clock()
        counts = self.action_log_store.aggregate_counts(since=now - self.config.stats_window_seconds)
        queue = self.queue_manager.items()
        state = self.raid_state
        return EngineStats(
            total_actions=len(self.action_log_store),
            last_24h_actions=sum(counts.values()),
            timeouts=counts[ActionType.TIMEOUT],
            bans=counts[ActionType.BAN],
            warnings=counts[ActionType.WARN],
            deletions=counts[ActionType.DELETE],
            queue_size=len(queue),
            questions_in_queue=sum(1 for q in queue if q.type == QueueItemType.QUESTION),
            giveaway_entries=sum(1 for q in queue if q.type == QueueItemType.GIVEAWAY),
            is_raid_mode=state.is_raid_mode,
            slow_mode_delay=state.slow_mode_delay_seconds,
        )

    # -- maintenance -------------------------------------------------------------

    def sweep(self) -> SweepReport:
        with self.lock:
            now = self.clock()
            actions_removed = self.action_log_store.prune(now - self.config.action_ttl_seconds)
            queue_removed = self.queue_manager.prune(now - self.config.queue_ttl_seconds)
            raid_cleared = False
            if self.raid_guard.should_clear(now):
                self.raid_guard.clear()
                raid_cleared = True
        report = SweepReport(actions_removed, queue_removed, raid_cleared)
        if actions_removed or queue_removed or raid_cleared:
            log_info(
                "maintenance.sweep",
                actions_removed=actions_removed,
                queue_items_removed=queue_removed,
                raid_cleared=raid_cleared,
            )
        return report


__all__ = ["ModerationEngine", "EngineSettings", "EngineQueue"]
