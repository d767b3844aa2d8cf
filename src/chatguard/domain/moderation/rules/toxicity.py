"""Deterministic toxicity heuristic.

Score = word hits * word_weight (+ caps_weight when the uppercase ratio of the
whole message exceeds caps_ratio) (+ punctuation_weight for runs of three or
more ``!``/``?``), clamped to [0, 1].
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from ...policy.models import ToxicityPolicy

_UPPER_RE = re.compile(r"[A-Z]")
_PUNCT_RUN_RE = re.compile(r"[!?]{3,}")


@dataclass(frozen=True)
class ToxicityWeights:
    words: Tuple[str, ...] = ("hate", "stupid", "dumb", "idiot", "trash")
    word_weight: float = 0.2
    caps_ratio: float = 0.7
    caps_weight: float = 0.3
    punctuation_weight: float = 0.2

    @classmethod
    def from_config(cls, cfg) -> "ToxicityWeights":
        return cls(
            words=tuple(cfg.toxic_words),
            word_weight=cfg.toxic_word_weight,
            caps_ratio=cfg.toxic_caps_ratio,
            caps_weight=cfg.toxic_caps_weight,
            punctuation_weight=cfg.toxic_punctuation_weight,
        )


DEFAULT_WEIGHTS = ToxicityWeights()


def raw_toxicity(text: str, weights: ToxicityWeights = DEFAULT_WEIGHTS) -> float:
    lowered = text.lower()
    score = sum(weights.word_weight for w in weights.words if w in lowered)
    if text and len(_UPPER_RE.findall(text)) / len(text) > weights.caps_ratio:
        score += weights.caps_weight
    if _PUNCT_RUN_RE.search(text):
        score += weights.punctuation_weight
    return min(max(score, 0.0), 1.0)


def score_toxicity(text: str, policy: ToxicityPolicy, weights: ToxicityWeights = DEFAULT_WEIGHTS) -> float:
    if not policy.enabled:
        return 0.0
    return raw_toxicity(text, weights)


def is_toxic(score: float, policy: ToxicityPolicy) -> bool:
    return score > policy.threshold


__all__ = ["ToxicityWeights", "DEFAULT_WEIGHTS", "raw_toxicity", "score_toxicity", "is_toxic"]
