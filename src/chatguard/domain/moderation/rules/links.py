from __future__ import annotations

import re
from typing import List

from ...policy.models import LinkPolicy

_LINK_RE = re.compile(r"https?://\S+|www\.\S+|\w+\.\w{2,}", re.IGNORECASE)


def find_links(text: str) -> List[str]:
    return _LINK_RE.findall(text)


def is_whitelisted(link: str, whitelist: List[str]) -> bool:
    lowered = link.lower()
    return any(entry.lower() in lowered for entry in whitelist)


def check_links(text: str, policy: LinkPolicy) -> bool:
    """True when the message should be blocked for its links.

    With ``block_all`` a single whitelisted link is enough to let the whole
    message through.
    """
    if not policy.enabled:
        return False
    links = find_links(text)
    if not links:
        return False
    if not policy.block_all:
        return False
    return not any(is_whitelisted(link, policy.whitelist) for link in links)


__all__ = ["check_links", "find_links", "is_whitelisted"]
