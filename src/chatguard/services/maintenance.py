"""Periodic maintenance sweeper.

Runs a tick callable on a daemon thread at a fixed interval until stopped.
The tick itself (``ModerationEngine.sweep``) takes the engine lock, so the
sweeper serializes against message and join processing like any other writer.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable

from ..infrastructure.logging.structured_logging import debug as log_debug, error as log_error, info as log_info, warning as log_warning


@dataclass(frozen=True)
class SweepReport:
    actions_removed: int = 0
    queue_items_removed: int = 0
    raid_cleared: bool = False


class MaintenanceSweeper:
    """
    Args:
        tick: Callable run once per interval.
        interval: Seconds between ticks.
        name: Thread name, also used in log events.
    """

    def __init__(self, tick: Callable[[], Any], interval: float = 60.0, name: str = "chatguard-sweeper"):
        if interval <= 0:
            raise ValueError("sweep interval must be positive")
        self._tick = tick
        self.interval = interval
        self.name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self):
        try:
            result = self._tick()
        except Exception as e:  # noqa: BLE001
            log_error("maintenance.tick_error", sweeper=self.name, error=str(e))
            return None
        log_debug("maintenance.tick", sweeper=self.name)
        return result

    def _run_loop(self):
        log_info("maintenance.started", sweeper=self.name, interval=self.interval)
        while not self._stop.wait(self.interval):
            self.run_once()
        log_info("maintenance.stopped", sweeper=self.name)

    def start(self):
        if self.running:
            log_warning("maintenance.already_running", sweeper=self.name)
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0):
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)


__all__ = ["MaintenanceSweeper", "SweepReport"]
