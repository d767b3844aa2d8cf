import pytest
import yaml

from chatguard.config.settings import EngineConfig
from chatguard.domain.moderation.models import ActionType
from chatguard.domain.policy.loader import load_presets, load_settings
from chatguard.domain.policy.presets import DEFAULT_SETTINGS
from chatguard.errors import ValidationError
from chatguard.services.engine_factory import build_engine
from chatguard.services.replay import ReplayClock, load_events, parse_events, replay


def _write(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


def test_load_settings_from_yaml(tmp_path):
    payload = DEFAULT_SETTINGS.to_payload()
    payload["toxicityFilter"]["threshold"] = 0.5
    settings = load_settings(_write(tmp_path / "settings.yaml", payload))
    assert settings.toxicity_filter.threshold == 0.5


def test_load_settings_requires_complete_structure(tmp_path):
    with pytest.raises(ValidationError):
        load_settings(_write(tmp_path / "partial.yaml", {"spamFilter": {"enabled": True}}))
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_settings(str(empty))


def test_missing_and_malformed_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "absent.yaml"))
    bad = tmp_path / "bad.yaml"
    bad.write_text("spamFilter: [unclosed", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_settings(str(bad))


def test_load_presets(tmp_path):
    path = _write(tmp_path / "presets.yaml", {"quiet": {"spamFilter": {"minInterval": 5}}})
    presets = load_presets(path)
    assert list(presets) == ["quiet"]
    with pytest.raises(ValidationError):
        load_presets(_write(tmp_path / "bad.yaml", {"broken": {"spamFilter": {"maxRepeats": 1}}}))
    with pytest.raises(ValidationError):
        load_presets(_write(tmp_path / "list.yaml", ["quiet"]))


def test_build_engine_applies_files(tmp_path):
    payload = DEFAULT_SETTINGS.to_payload()
    payload["linkPolicy"]["blockAll"] = False
    cfg = EngineConfig(
        autostart_sweeper=False,
        settings_file=_write(tmp_path / "settings.yaml", payload),
        presets_file=_write(tmp_path / "presets.yaml", {"quiet": {"spamFilter": {"minInterval": 5}}}),
    )
    with build_engine(cfg) as engine:
        assert engine.settings.get().link_policy.block_all is False
        assert "quiet" in engine.settings.presets()
        assert engine.settings.apply_preset("quiet")


def test_parse_events_validation():
    with pytest.raises(ValidationError):
        parse_events({"kind": "join"})
    with pytest.raises(ValidationError):
        parse_events([{"kind": "join"}])
    with pytest.raises(ValidationError):
        parse_events([{"kind": "message", "timestamp": 1}])
    with pytest.raises(ValidationError):
        parse_events([{"kind": "part", "timestamp": 1}])


def test_replay_drives_engine_with_event_time(tmp_path):
    events = [
        {"kind": "message", "user": "alice", "message": "check evil.com", "timestamp": 100.0},
        {"kind": "join", "timestamp": 101.0},
        {"kind": "join", "timestamp": 102.0},
        {"kind": "message", "user": "bob", "message": "hello there", "timestamp": 103.5},
    ]
    parsed = load_events(_write(tmp_path / "events.yaml", events))
    clock = ReplayClock(0.0)
    cfg = EngineConfig(autostart_sweeper=False)
    with build_engine(cfg, clock=clock, start_sweeper=False) as engine:
        engine.settings.update({"raidGuard": {"enabled": True, "threshold": 1, "action": "slowMode"}})
        results = replay(engine, parsed, clock)
    assert [r.event.kind for r in results] == ["message", "join", "join", "message"]
    assert results[0].action.type == ActionType.DELETE
    assert results[0].action.timestamp == 100.0
    assert results[1].action is None
    assert results[2].action.moderator == "RaidGuard"
    assert results[3].action is None
    assert clock.now == 103.5
