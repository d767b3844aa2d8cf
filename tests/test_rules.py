import pytest

from chatguard.domain.moderation.history import UserHistoryTracker
from chatguard.domain.moderation.models import ChatMessage, Flag
from chatguard.domain.moderation.rules import banned_words
from chatguard.domain.moderation.rules.banned_words import check_banned_words, invalid_patterns
from chatguard.domain.moderation.rules.links import check_links, find_links
from chatguard.domain.moderation.rules.spam import caps_percentage, check_spam, count_emotes
from chatguard.domain.moderation.rules.toxicity import (
    ToxicityWeights,
    is_toxic,
    raw_toxicity,
    score_toxicity,
)
from chatguard.domain.policy.models import (
    BannedWordsPolicy,
    LinkPolicy,
    SpamFilterPolicy,
    ToxicityPolicy,
)


def _spam_policy(**kw):
    base = dict(enabled=True, max_repeats=3, caps_threshold=70, emote_limit=5, min_interval=2)
    base.update(kw)
    return SpamFilterPolicy(**base)


def _msg(text, ts, user="alice"):
    return ChatMessage(f"m{ts}", user, text, ts)


# --- spam -----------------------------------------------------------------

def test_caps_percentage_ignores_non_letters():
    assert caps_percentage("HELLO WORLD") == 100
    assert caps_percentage("Hello world") == pytest.approx(10.0)
    assert caps_percentage("1234 !!") is None


def test_excessive_caps_flagged_only_above_threshold():
    history = UserHistoryTracker()
    policy = _spam_policy()
    assert Flag.EXCESSIVE_CAPS.value in check_spam(_msg("HELLO WORLD", 0), history, policy)
    assert check_spam(_msg("Hello world", 10), history, policy) == []


def test_identical_messages_within_interval_flag_fast_and_repeated():
    history = UserHistoryTracker()
    policy = _spam_policy()
    assert check_spam(_msg("buy now", 0.0), history, policy) == []
    assert check_spam(_msg("buy now", 0.5), history, policy) == [Flag.FAST_MESSAGING.value]
    assert check_spam(_msg("buy now", 1.0), history, policy) == [
        Flag.FAST_MESSAGING.value,
        Flag.REPEATED_MESSAGE.value,
    ]


def test_repeat_window_only_looks_at_last_max_repeats():
    history = UserHistoryTracker()
    policy = _spam_policy(max_repeats=2, min_interval=0)
    for ts, text in ((0, "same"), (10, "other"), (20, "other")):
        check_spam(_msg(text, ts), history, policy)
    assert Flag.REPEATED_MESSAGE.value not in check_spam(_msg("same", 30), history, policy)
    assert Flag.REPEATED_MESSAGE.value in check_spam(_msg("same", 40), history, policy)


def test_emote_spam():
    history = UserHistoryTracker()
    assert count_emotes(":a: :b: :c:") == 3
    flags = check_spam(_msg(":a: :b: :c: :d: :e: :f:", 0), history, _spam_policy())
    assert flags == [Flag.EMOTE_SPAM.value]


def test_disabled_spam_filter_still_records_history():
    history = UserHistoryTracker()
    policy = _spam_policy(enabled=False)
    assert check_spam(_msg("HELLO", 0), history, policy) == []
    assert len(history.history("alice")) == 1


# --- links ----------------------------------------------------------------

def _links(**kw):
    base = dict(enabled=True, block_all=True, whitelist=["youtube.com"])
    base.update(kw)
    return LinkPolicy(**base)


def test_find_links_variants():
    assert find_links("see https://example.org/x now") == ["https://example.org/x"]
    assert find_links("go to www.site.net") == ["www.site.net"]
    assert find_links("no links here") == []


def test_whitelisted_link_is_allowed():
    assert check_links("check youtube.com/xyz", _links()) is False
    assert check_links("check YOUTUBE.COM/xyz", _links()) is False


def test_non_whitelisted_link_is_blocked():
    assert check_links("check evil.com", _links()) is True


def test_links_pass_when_block_all_off_or_disabled():
    assert check_links("check evil.com", _links(block_all=False)) is False
    assert check_links("check evil.com", _links(enabled=False)) is False


# --- banned words ---------------------------------------------------------

def _banned(**kw):
    base = dict(enabled=True, words=[], regex_patterns=[])
    base.update(kw)
    return BannedWordsPolicy(**base)


def test_banned_word_case_insensitive_substring():
    policy = _banned(words=["Frobnic"])
    assert check_banned_words("stop FROBNICATING please", policy)
    assert not check_banned_words("all good", policy)


def test_regex_pattern_matches_case_insensitively():
    policy = _banned(regex_patterns=[r"fr[e3]e\s+v-?bucks"])
    assert check_banned_words("FREE vbucks here", policy)
    assert check_banned_words("fr3e v-bucks", policy)


def test_invalid_pattern_is_skipped_and_logged_once(caplog):
    banned_words._compile.cache_clear()
    caplog.set_level("WARNING", logger="chatguard")
    policy = _banned(regex_patterns=["([unclosed", "spam+"])
    assert check_banned_words("spammm", policy)
    assert not check_banned_words("clean", policy)
    warnings = [r for r in caplog.records if "banned_words.invalid_pattern" in r.getMessage()]
    assert len(warnings) == 1
    assert invalid_patterns(policy.regex_patterns) == ["([unclosed"]


def test_disabled_banned_words():
    assert not check_banned_words("badword", _banned(enabled=False, words=["badword"]))


# --- toxicity -------------------------------------------------------------

def _tox(**kw):
    base = dict(enabled=True, threshold=0.7, action="timeout")
    base.update(kw)
    return ToxicityPolicy(**base)


def test_raw_toxicity_components():
    assert raw_toxicity("I hate this") == pytest.approx(0.2)
    assert raw_toxicity("I hate this!!!") == pytest.approx(0.4)
    assert raw_toxicity("WHAT") == pytest.approx(0.3)
    assert raw_toxicity("") == 0.0


def test_toxicity_clamped_to_one():
    text = "HATE STUPID DUMB IDIOT TRASH!!!"
    assert raw_toxicity(text) == 1.0


def test_score_zero_when_disabled():
    assert score_toxicity("hate stupid dumb idiot", _tox(enabled=False)) == 0.0


def test_is_toxic_is_strictly_greater_than_threshold():
    policy = _tox(threshold=0.4)
    assert not is_toxic(0.4, policy)
    assert is_toxic(0.41, policy)


def test_custom_weights():
    weights = ToxicityWeights(words=("meanie",), word_weight=0.5)
    assert raw_toxicity("you meanie", weights) == pytest.approx(0.5)
    assert raw_toxicity("you idiot", weights) == 0.0
