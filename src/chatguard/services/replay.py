"""Replay a recorded event stream (messages and joins) through an engine.

Event files are YAML or JSON lists::

    - {kind: join, timestamp: 1700000000}
    - {kind: message, user: alice, message: "hi", timestamp: 1700000001.5}

The engine is driven by a ``ReplayClock`` advanced to each event's timestamp,
so time windows behave as they did when the events were recorded.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ..domain.moderation.models import ChatMessage, ModAction, new_id
from ..domain.policy.loader import read_yaml
from ..errors import ValidationError


class ReplayClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_to(self, ts: float):
        if ts > self.now:
            self.now = ts


@dataclass(frozen=True)
class ReplayEvent:
    kind: str
    timestamp: float
    user: str = ""
    message: str = ""


@dataclass(frozen=True)
class ReplayResult:
    event: ReplayEvent
    action: Optional[ModAction]


def parse_events(raw: Any) -> List[ReplayEvent]:
    if not isinstance(raw, list):
        raise ValidationError("Replay file must contain a list of events")
    events: List[ReplayEvent] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"Event #{idx} must be a mapping")
        kind = str(item.get("kind", "")).lower()
        try:
            ts = float(item["timestamp"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError(f"Event #{idx} needs a numeric timestamp") from None
        if kind == "join":
            events.append(ReplayEvent(kind, ts))
        elif kind == "message":
            user, text = item.get("user"), item.get("message")
            if not user or text is None:
                raise ValidationError(f"Message event #{idx} needs user and message")
            events.append(ReplayEvent(kind, ts, str(user), str(text)))
        else:
            raise ValidationError(f"Event #{idx} has unknown kind '{kind}'")
    return events


def load_events(path: str) -> List[ReplayEvent]:
    return parse_events(read_yaml(path) or [])


def replay(engine, events: Iterable[ReplayEvent], clock: ReplayClock) -> List[ReplayResult]:
    results: List[ReplayResult] = []
    for ev in sorted(events, key=lambda e: e.timestamp):
        clock.advance_to(ev.timestamp)
        if ev.kind == "join":
            action = engine.submit_join()
        else:
            action = engine.submit_message(ChatMessage(new_id(), ev.user, ev.message, ev.timestamp))
        results.append(ReplayResult(ev, action))
    return results


__all__ = ["ReplayClock", "ReplayEvent", "ReplayResult", "parse_events", "load_events", "replay"]
