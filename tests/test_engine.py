import json
import threading

import pytest

from chatguard.domain.moderation.models import ActionType, ModerationVerdict
from chatguard.domain.policy.presets import DEFAULT_SETTINGS
from chatguard.engine import ModerationEngine
from chatguard.errors import NotFoundError


def test_submit_message_returns_and_logs_action(engine, make_message):
    action = engine.submit_message(make_message("alice", "check evil.com"))
    assert action.type == ActionType.DELETE
    assert engine.action_log == (action,)
    assert engine.recent_actions() == [action]
    assert engine.actions_for("alice") == [action]


def test_assess_message_returns_full_verdict(engine, make_message):
    verdict = engine.assess_message(make_message("alice", "I hate this!!!"))
    assert verdict.toxicity == pytest.approx(0.4)
    assert verdict.action is None


def test_listeners_receive_actions_and_failures_are_isolated(engine, make_message, caplog):
    caplog.set_level("ERROR", logger="chatguard")
    seen = []

    def broken(action):
        raise RuntimeError("enforcer offline")

    engine.add_listener(broken)
    engine.add_listener(seen.append)
    action = engine.submit_message(make_message("bob", "check evil.com"))
    assert seen == [action]
    assert any("enforcement.listener_error" in r.getMessage() for r in caplog.records)


def test_evaluator_failure_does_not_abort_processing(engine, make_message, monkeypatch, caplog):
    caplog.set_level("ERROR", logger="chatguard")

    def explode(message):
        raise RuntimeError("boom")

    monkeypatch.setattr(engine.pipeline, "assess", explode)
    assert engine.submit_message(make_message("alice", "hello")) is None
    assert engine.assess_message(make_message("alice", "hello")) == ModerationVerdict()
    assert any("moderation.error" in r.getMessage() for r in caplog.records)


def test_fifty_one_joins_trigger_lockdown(engine):
    engine.settings.update({"raidGuard": {"enabled": True, "threshold": 50, "action": "lockdown"}})
    results = [engine.submit_join() for _ in range(51)]
    assert all(r is None for r in results[:50])
    assert results[50].type == ActionType.WARN
    state = engine.raid_state
    assert state.is_raid_mode is True
    assert state.slow_mode_delay_seconds == 30


def test_raid_state_is_a_copy(engine):
    state = engine.raid_state
    state.is_raid_mode = True
    assert engine.raid_state.is_raid_mode is False


def test_action_log_is_bounded(engine, make_message):
    for i in range(150):
        engine.submit_message(make_message(f"user{i}", "check evil.com"))
    assert len(engine.action_log) == 100
    assert engine.action_log[-1].user == "user149"


def test_user_history_is_bounded(engine, make_message, clock):
    for i in range(15):
        clock.advance(10)
        engine.submit_message(make_message("alice", f"message number {i}"))
    assert len(engine.history.history("alice")) == 10


def test_record_action_notifies_listeners(engine):
    seen = []
    engine.add_listener(seen.append)
    action = engine.record_action("ban", "mallory", "manual ban", "mod_jane")
    assert action.type == ActionType.BAN
    assert action.moderator == "mod_jane"
    assert seen == [action]


def test_settings_facade_reports_failures_without_raising(engine):
    assert engine.settings.update({"spamFilter": {"maxRepeats": 5}}) is True
    assert engine.settings.get().spam_filter.max_repeats == 5
    assert engine.settings.update({"spamFilter": {"maxRepeats": 0}}) is False
    assert engine.settings.apply_preset("does-not-exist") is False
    assert engine.settings.import_("{oops") is False
    assert engine.settings.import_(b"\xff{\"spamFilter\": 1}") is False
    assert engine.settings.get().spam_filter.max_repeats == 5


def test_settings_export_import_and_reset(engine):
    assert engine.settings.apply_preset("party") is True
    assert engine.settings.active_preset == "party"
    exported = engine.settings.export()
    assert json.loads(exported)["toxicityFilter"]["action"] == "warn"
    engine.settings.reset()
    assert engine.settings.get() == DEFAULT_SETTINGS
    assert engine.settings.import_(exported) is True
    assert engine.settings.active_preset == "party"


def test_queue_facade_and_winner_notification(engine):
    seen = []
    engine.add_listener(seen.append)
    entries = [engine.queue.add(u, "enter", "giveaway") for u in ("a", "b", "c")]
    engine.queue.add("q", "question?", "question")
    winners = [engine.queue.draw_winner() for _ in range(3)]
    assert sorted(w.user for w in winners) == ["a", "b", "c"]
    assert engine.queue.draw_winner() is None
    assert len(seen) == 3
    assert all(a.reason == "🎉 Won the giveaway!" for a in seen)
    assert engine.queue.approve(entries[0].id) is True
    assert engine.queue.approve("missing") is False
    with pytest.raises(NotFoundError):
        engine.queue.get("missing")
    assert engine.queue.clear("giveaway") == 3
    assert len(engine.queue) == 1


def test_concurrent_draws_never_pick_the_same_entry(engine):
    for i in range(50):
        engine.queue.add(f"user{i}", "enter", "giveaway")
    winners = []
    lock = threading.Lock()

    def worker():
        while True:
            winner = engine.queue.draw_winner()
            if winner is None:
                return
            with lock:
                winners.append(winner.id)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)
    assert len(winners) == 50
    assert len(set(winners)) == 50


def test_stats(engine, make_message, clock):
    engine.submit_message(make_message("a", "check evil.com"))
    engine.record_action("timeout", "b", "manual", "mod")
    engine.record_action("ban", "c", "manual", "mod")
    engine.queue.add("q", "question?", "question")
    engine.queue.add("g", "enter", "giveaway")
    stats = engine.stats().to_dict()
    assert stats == {
        "totalActions": 3,
        "last24hActions": 3,
        "timeouts": 1,
        "bans": 1,
        "warnings": 0,
        "deletions": 1,
        "queueSize": 2,
        "questionsInQueue": 1,
        "giveawayEntries": 1,
        "isRaidMode": False,
        "slowModeDelay": 0,
    }


def test_stats_window_excludes_old_actions(engine, clock):
    engine.record_action("warn", "old", "manual", "mod")
    clock.advance(engine.config.stats_window_seconds + 1)
    engine.record_action("ban", "new", "manual", "mod")
    stats = engine.stats()
    assert stats.total_actions == 2
    assert stats.last_24h_actions == 1
    assert (stats.warnings, stats.bans) == (0, 1)


def test_context_manager_stops_sweeper(config, clock):
    with ModerationEngine(config, clock=clock, start_sweeper=True) as eng:
        assert eng.sweeper.running
    assert not eng.sweeper.running
