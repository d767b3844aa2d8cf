"""Engine launcher.

Provides a console entry point for `python -m chatguard` with optional flags:
  --dry-run        Validate config, settings & presets, print summary, exit.
  --preset NAME    Apply a preset before doing anything else.
  --replay FILE    Feed a recorded event list through the engine and print decisions.
  --detail         Include whitelist and banned word lists in the summary.
"""
from __future__ import annotations

import argparse
import sys

from .config.settings import load_config
from .domain.moderation.rules import invalid_patterns
from .domain.policy.formatter import format_settings
from .errors import EngineError
from .infrastructure.logging.structured_logging import init_logging
from .services.engine_factory import build_engine
from .services.replay import ReplayClock, load_events, replay
from .utils.format_utils import excerpt


def _print_header(engine):
    print("chatguard: presets=%s active=%s" % (",".join(engine.settings.presets()), engine.settings.active_preset or "custom"))


def _validate_settings(engine, detail: bool = False) -> bool:
    settings = engine.settings.get()
    print(format_settings(settings, engine.settings.active_preset, detail=detail))
    broken = invalid_patterns(settings.banned_words.regex_patterns)
    if broken:
        print("Invalid regex patterns (ignored at runtime): " + ", ".join(broken), file=sys.stderr)
        return False
    return True


def _run_replay(path: str, args, cfg) -> int:
    events = load_events(path)
    start = min((e.timestamp for e in events), default=0.0)
    clock = ReplayClock(start)
    with build_engine(cfg, clock=clock, start_sweeper=False) as engine:
        if args.preset and not engine.settings.apply_preset(args.preset):
            print(f"Unknown preset: {args.preset}", file=sys.stderr)
            return 1
        for res in replay(engine, events, clock):
            if res.action is None:
                continue
            ev = res.event
            subject = ev.user if ev.kind == "message" else "join"
            print(f"[{ev.timestamp:.1f}] {res.action.type.value:<7} {subject}: {res.action.reason}"
                  + (f"  | {excerpt(ev.message, 60)}" if ev.kind == "message" else ""))
        engine.sweep()
        print("\nStats:")
        for k, v in engine.stats().to_dict().items():
            print(f"  {k}={v}")
    return 0


def main(argv: list[str] | None = None, *, dry_run: bool | None = None):
    parser = argparse.ArgumentParser(description="Run the chat moderation decision engine")
    parser.add_argument("--dry-run", action="store_true", help="Validate config, settings & presets then exit")
    parser.add_argument("--preset", help="Apply a named preset first")
    parser.add_argument("--replay", metavar="FILE", help="Replay a YAML/JSON event list through the engine")
    parser.add_argument("--detail", action="store_true", help="Show list contents in the settings summary")
    args = parser.parse_args(argv)

    if dry_run is True:
        args.dry_run = True

    try:
        cfg = load_config()
    except Exception as e:  # pydantic_settings raises pydantic.ValidationError
        print(f"Config load failed: {e}", file=sys.stderr)
        sys.exit(1)
    init_logging(cfg.log_level, json_output=cfg.log_json)

    try:
        if args.replay:
            sys.exit(_run_replay(args.replay, args, cfg))

        with build_engine(cfg, start_sweeper=False) as engine:
            if args.preset and not engine.settings.apply_preset(args.preset):
                print(f"Unknown preset: {args.preset}", file=sys.stderr)
                sys.exit(1)
            _print_header(engine)
            ok = _validate_settings(engine, detail=args.detail)
    except (EngineError, FileNotFoundError) as e:
        print(f"Startup failed: {e}", file=sys.stderr)
        sys.exit(1)

    if args.dry_run:
        print("\nDry run validation " + ("successful." if ok else "found problems."))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":  # pragma: no cover
    main()
