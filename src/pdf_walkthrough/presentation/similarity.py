"""Fuzzy text similarity between narration text and extracted fragments."""

import re

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.9
CONTAINMENT_WEIGHT = 0.8

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, replace punctuation with spaces, and collapse whitespace."""
    if not text:
        return ""
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def tokens(text: str) -> list[str]:
    """Normalized words longer than one character."""
    return [word for word in normalize_text(text).split(" ") if len(word) > 1]


def is_contained(a: str, b: str) -> bool:
    """True when either normalized text contains the other; both must be non-empty."""
    norm_a, norm_b = normalize_text(a), normalize_text(b)
    if not norm_a or not norm_b:
        return False
    return norm_a in norm_b or norm_b in norm_a


def text_similarity(a: str, b: str) -> float:
    """Score two texts in [0, 1].

    Equal normalized texts score 1.0 and containment either way scores 0.9.
    Otherwise the result is the larger of token-set Jaccard similarity and
    0.8 times the fraction of the shorter token list found in the longer.
    """
    norm_a, norm_b = normalize_text(a), normalize_text(b)

    if norm_a == norm_b:
        return EXACT_SCORE if norm_a else 0.0
    if not norm_a or not norm_b:
        return 0.0
    if norm_a in norm_b or norm_b in norm_a:
        return CONTAINMENT_SCORE

    words_a, words_b = tokens(norm_a), tokens(norm_b)
    if not words_a or not words_b:
        return 0.0

    set_a, set_b = set(words_a), set(words_b)
    jaccard = len(set_a & set_b) / len(set_a | set_b)

    shorter, longer = (words_a, set_b) if len(words_a) < len(words_b) else (words_b, set_a)
    containment = sum(1 for word in shorter if word in longer) / len(shorter)

    return max(jaccard, containment * CONTAINMENT_WEIGHT)


def has_keyword_overlap(query: str, text: str) -> bool:
    """True when any query word longer than two characters appears in text."""
    norm_text = normalize_text(text)
    if not norm_text:
        return False
    return any(
        len(word) > 2 and word in norm_text for word in normalize_text(query).split(" ")
    )
