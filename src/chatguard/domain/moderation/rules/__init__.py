"""Rule evaluators run by the decision pipeline."""
from .spam import check_spam, spam_flags
from .links import check_links, find_links
from .banned_words import check_banned_words, invalid_patterns
from .toxicity import ToxicityWeights, DEFAULT_WEIGHTS, score_toxicity, is_toxic

__all__ = [
    'check_spam', 'spam_flags',
    'check_links', 'find_links',
    'check_banned_words', 'invalid_patterns',
    'ToxicityWeights', 'DEFAULT_WEIGHTS', 'score_toxicity', 'is_toxic',
]
