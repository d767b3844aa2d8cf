"""Policy domain models.

``ModSettings`` is the complete moderation configuration: five policy blocks,
every field required. ``SettingsPatch`` mirrors it with every block and leaf
optional and is what presets and partial updates are expressed in.
Both serialize with camelCase aliases (``spamFilter.maxRepeats``) and accept
either camelCase or snake_case on input.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToxicityAction(str, Enum):
    WARN = "warn"
    TIMEOUT = "timeout"
    BAN = "ban"


class RaidAction(str, Enum):
    SLOW_MODE = "slowMode"
    SUB_ONLY = "subOnly"
    LOCKDOWN = "lockdown"


def _clean_list(v):
    if v is None:
        return v
    if isinstance(v, str):
        raise ValueError("expected a list of strings")
    return [str(item) for item in v if str(item)]


StrList = Annotated[List[str], BeforeValidator(_clean_list)]


class _Block(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class SpamFilterPolicy(_Block):
    enabled: bool
    max_repeats: int = Field(ge=2)
    caps_threshold: float = Field(ge=0, le=100)
    emote_limit: int = Field(ge=0)
    min_interval: float = Field(ge=0)


class LinkPolicy(_Block):
    enabled: bool
    block_all: bool
    whitelist: StrList


class BannedWordsPolicy(_Block):
    enabled: bool
    words: StrList
    regex_patterns: StrList


class ToxicityPolicy(_Block):
    enabled: bool
    threshold: float = Field(ge=0, le=1)
    action: ToxicityAction


class RaidGuardPolicy(_Block):
    enabled: bool
    threshold: int = Field(ge=0)
    action: RaidAction


class ModSettings(_Block):
    """Complete, always-valid moderation settings."""
    spam_filter: SpamFilterPolicy
    link_policy: LinkPolicy
    banned_words: BannedWordsPolicy
    toxicity_filter: ToxicityPolicy
    raid_guard: RaidGuardPolicy

    def to_payload(self) -> Dict[str, Any]:
        """camelCase plain-data form used for export."""
        return self.model_dump(mode="json", by_alias=True)

    def merged(self, patch: "SettingsPatch") -> "ModSettings":
        """Per-block shallow merge; the result is validated as a whole."""
        data = self.model_dump()
        for block, fields in patch.model_dump(exclude_unset=True).items():
            if fields is None:
                continue
            data[block].update(fields)
        return ModSettings.model_validate(data)

    def satisfies(self, patch: "SettingsPatch") -> bool:
        """True when every field set in ``patch`` already has that value."""
        current = self.model_dump()
        for block, fields in patch.model_dump(exclude_unset=True).items():
            for key, value in (fields or {}).items():
                if current[block].get(key) != value:
                    return False
        return True


# --- partial forms -------------------------------------------------------

class SpamFilterPatch(_Block):
    enabled: Optional[bool] = None
    max_repeats: Optional[int] = Field(None, ge=2)
    caps_threshold: Optional[float] = Field(None, ge=0, le=100)
    emote_limit: Optional[int] = Field(None, ge=0)
    min_interval: Optional[float] = Field(None, ge=0)


class LinkPolicyPatch(_Block):
    enabled: Optional[bool] = None
    block_all: Optional[bool] = None
    whitelist: Optional[StrList] = None


class BannedWordsPatch(_Block):
    enabled: Optional[bool] = None
    words: Optional[StrList] = None
    regex_patterns: Optional[StrList] = None


class ToxicityPatch(_Block):
    enabled: Optional[bool] = None
    threshold: Optional[float] = Field(None, ge=0, le=1)
    action: Optional[ToxicityAction] = None


class RaidGuardPatch(_Block):
    enabled: Optional[bool] = None
    threshold: Optional[int] = Field(None, ge=0)
    action: Optional[RaidAction] = None


class SettingsPatch(_Block):
    spam_filter: Optional[SpamFilterPatch] = None
    link_policy: Optional[LinkPolicyPatch] = None
    banned_words: Optional[BannedWordsPatch] = None
    toxicity_filter: Optional[ToxicityPatch] = None
    raid_guard: Optional[RaidGuardPatch] = None


__all__ = [
    'ToxicityAction', 'RaidAction',
    'SpamFilterPolicy', 'LinkPolicy', 'BannedWordsPolicy', 'ToxicityPolicy', 'RaidGuardPolicy',
    'ModSettings', 'SettingsPatch',
    'SpamFilterPatch', 'LinkPolicyPatch', 'BannedWordsPatch', 'ToxicityPatch', 'RaidGuardPatch',
]
