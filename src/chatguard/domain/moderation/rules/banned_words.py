"""Banned word and custom regex matching."""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional

from ....infrastructure.logging.structured_logging import warning as log_warning
from ...policy.models import BannedWordsPolicy


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Optional[re.Pattern]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        log_warning("banned_words.invalid_pattern", pattern=pattern, error=str(e))
        return None


def invalid_patterns(patterns: Iterable[str]) -> List[str]:
    return [p for p in patterns if _compile(p) is None]


def matches_word(text: str, words: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(w.lower() in lowered for w in words if w)


def matches_pattern(text: str, patterns: Iterable[str]) -> bool:
    for pattern in patterns:
        compiled = _compile(pattern)
        if compiled is not None and compiled.search(text):
            return True
    return False


def check_banned_words(text: str, policy: BannedWordsPolicy) -> bool:
    if not policy.enabled:
        return False
    return matches_word(text, policy.words) or matches_pattern(text, policy.regex_patterns)


__all__ = ["check_banned_words", "matches_word", "matches_pattern", "invalid_patterns"]
