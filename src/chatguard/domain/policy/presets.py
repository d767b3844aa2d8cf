"""Default settings and built-in presets."""
from __future__ import annotations

from typing import Dict

from .models import ModSettings, SettingsPatch

DEFAULT_SETTINGS = ModSettings.model_validate({
    "spamFilter": {
        "enabled": True,
        "maxRepeats": 3,
        "capsThreshold": 70,
        "emoteLimit": 5,
        "minInterval": 2,
    },
    "linkPolicy": {
        "enabled": True,
        "blockAll": True,
        "whitelist": ["discord.gg/myserver", "twitter.com/myprofile", "youtube.com", "twitch.tv"],
    },
    "bannedWords": {
        "enabled": True,
        "words": [],
        "regexPatterns": [],
    },
    "toxicityFilter": {
        "enabled": True,
        "threshold": 0.7,
        "action": "timeout",
    },
    "raidGuard": {
        "enabled": False,
        "threshold": 50,
        "action": "slowMode",
    },
})

# Every preset sets the same fields. Lists (whitelist, banned words, patterns) and emoteLimit stay user-owned.
# Raid guard levels: low=100/slowMode, medium=50/subOnly, max=20/lockdown.
# minInterval is the slow-mode seconds; blockAll is set only by lockdown.
BUILTIN_PRESETS: Dict[str, SettingsPatch] = {
    "chill": SettingsPatch.model_validate({
        "spamFilter": {"enabled": False, "maxRepeats": 7, "capsThreshold": 92, "minInterval": 0},
        "linkPolicy": {"enabled": True, "blockAll": False},
        "toxicityFilter": {"enabled": True, "threshold": 0.95, "action": "warn"},
        "raidGuard": {"enabled": True, "threshold": 100, "action": "slowMode"},
    }),
    "balanced": SettingsPatch.model_validate({
        "spamFilter": {"enabled": True, "maxRepeats": 3, "capsThreshold": 75, "minInterval": 2},
        "linkPolicy": {"enabled": True, "blockAll": False},
        "toxicityFilter": {"enabled": True, "threshold": 0.85, "action": "timeout"},
        "raidGuard": {"enabled": True, "threshold": 50, "action": "subOnly"},
    }),
    "party": SettingsPatch.model_validate({
        "spamFilter": {"enabled": True, "maxRepeats": 5, "capsThreshold": 90, "minInterval": 0},
        "linkPolicy": {"enabled": True, "blockAll": False},
        "toxicityFilter": {"enabled": True, "threshold": 0.9, "action": "warn"},
        "raidGuard": {"enabled": True, "threshold": 100, "action": "slowMode"},
    }),
    "lockdown": SettingsPatch.model_validate({
        "spamFilter": {"enabled": True, "maxRepeats": 2, "capsThreshold": 55, "minInterval": 15},
        "linkPolicy": {"enabled": True, "blockAll": True},
        "toxicityFilter": {"enabled": True, "threshold": 0.7, "action": "timeout"},
        "raidGuard": {"enabled": True, "threshold": 20, "action": "lockdown"},
    }),
}

__all__ = ["DEFAULT_SETTINGS", "BUILTIN_PRESETS"]
