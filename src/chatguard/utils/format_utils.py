"""Formatting helpers for log fields and CLI output."""
from __future__ import annotations


def excerpt(text: str, limit: int = 140) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


__all__ = ["excerpt"]
