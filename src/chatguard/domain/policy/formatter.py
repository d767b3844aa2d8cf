"""Settings formatting utilities."""
from __future__ import annotations

from typing import List, Optional

from .models import ModSettings


def _onoff(flag: bool) -> str:
    return "on" if flag else "off"


def format_settings(settings: ModSettings, active_preset: Optional[str] = None, detail: bool = False) -> str:
    s = settings
    lines: List[str] = [f"Preset: {active_preset or 'custom'}"]
    sp = s.spam_filter
    lines.append(
        f"spam: {_onoff(sp.enabled)} maxRepeats={sp.max_repeats} caps>{sp.caps_threshold:g}% "
        f"emotes>{sp.emote_limit} minInterval={sp.min_interval:g}s"
    )
    lp = s.link_policy
    lines.append(f"links: {_onoff(lp.enabled)} blockAll={lp.block_all} whitelist={len(lp.whitelist)}")
    bw = s.banned_words
    lines.append(f"banned words: {_onoff(bw.enabled)} words={len(bw.words)} patterns={len(bw.regex_patterns)}")
    tx = s.toxicity_filter
    lines.append(f"toxicity: {_onoff(tx.enabled)} threshold={tx.threshold:.2f} action={tx.action.value}")
    rg = s.raid_guard
    lines.append(f"raid guard: {_onoff(rg.enabled)} threshold={rg.threshold} joins/min action={rg.action.value}")
    if detail:
        if lp.whitelist:
            lines.append("")
            lines.append("Link whitelist:")
            lines.extend(f"  - {entry}" for entry in lp.whitelist)
        if bw.words or bw.regex_patterns:
            lines.append("")
            lines.append("Banned:")
            lines.extend(f"  - word: {w}" for w in bw.words)
            lines.extend(f"  - regex: {p}" for p in bw.regex_patterns)
    return "\n".join(lines)


__all__ = ['format_settings']
