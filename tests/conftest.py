"""
Pytest configuration and fixtures for chatguard tests.
"""
import random

import pytest

from chatguard.config.settings import EngineConfig
from chatguard.domain.moderation.models import ChatMessage, new_id
from chatguard.engine import ModerationEngine


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return EngineConfig(autostart_sweeper=False, settings_file=None, presets_file=None)


@pytest.fixture
def engine(config, clock):
    eng = ModerationEngine(config, clock=clock, rng=random.Random(1234), start_sweeper=False)
    yield eng
    eng.shutdown()


@pytest.fixture
def make_message(clock):
    def _make(user: str, text: str, at: float | None = None) -> ChatMessage:
        return ChatMessage(new_id(), user, text, clock.now if at is None else at)
    return _make
