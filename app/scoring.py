from __future__ import annotations

import math

from distance import edit_distance
from normalizer import NormalizedAnswer, normalize

BUCKETS = (0.0, 0.3, 0.5, 0.8, 0.9, 1.0)

SHORT_ANSWER_WORDS = 3
CHAR_DISCOUNT = 0.9

# (lower bound, bucket); combined must be strictly greater than the bound
_QUANTIZE_STEPS = (
    (0.8, 1.0),
    (0.6, 0.8),
    (0.4, 0.5),
    (0.2, 0.3),
)


def quantize(combined: float) -> float:
    """Snap a continuous similarity onto the grading buckets."""
    for bound, bucket in _QUANTIZE_STEPS:
        if combined > bound:
            return bucket
    return 0.0


def words_match(word_a: str, word_b: str) -> bool:
    """Approximate match used for word overlap: exact, containment or close spelling."""
    if word_a == word_b:
        return True
    if len(word_a) <= 3 or len(word_b) <= 3:
        return False
    if word_a in word_b or word_b in word_a:
        return True
    limit = max(1, math.floor(max(len(word_a), len(word_b)) * 0.3))
    return edit_distance(word_a, word_b) <= limit


def word_score(reference: NormalizedAnswer, candidate: NormalizedAnswer) -> float:
    """Fraction of reference words covered by candidate words.

    Each candidate word counts once if any reference word matches it, so a
    repeated candidate word can match the same reference word again.
    """
    if not reference.words:
        return 0.0
    matched = sum(
        1
        for word in candidate.words
        if any(words_match(word, ref_word) for ref_word in reference.words)
    )
    return matched / len(reference.words)


def char_score(reference: NormalizedAnswer, candidate: NormalizedAnswer) -> float:
    """Distinct shared characters over the reference character count."""
    if not reference.chars:
        return 0.0
    shared = set(candidate.chars) & set(reference.chars)
    return len(shared) / len(reference.chars)


def _short_answer_score(reference: NormalizedAnswer, candidate: NormalizedAnswer) -> float | None:
    if reference.text in candidate.text or candidate.text in reference.text:
        return 0.9
    if len(reference.words) == 1 and len(candidate.words) == 1:
        threshold = max(2, min(len(candidate.text), len(reference.text)) // 3)
        if edit_distance(candidate.text, reference.text) <= threshold:
            return 0.8
    return None


def score(reference: str, candidate: str) -> float:
    """Grade a candidate answer against the reference, returning one of BUCKETS."""
    ref = normalize(reference)
    cand = normalize(candidate)

    if not ref or not cand:
        return 0.0
    if cand.text == ref.text:
        return 1.0

    if len(ref.words) <= SHORT_ANSWER_WORDS and len(cand.words) <= SHORT_ANSWER_WORDS:
        short = _short_answer_score(ref, cand)
        if short is not None:
            return short

    combined = max(word_score(ref, cand), char_score(ref, cand) * CHAR_DISCOUNT)
    return quantize(combined)


def score_percent(reference: str, candidate: str) -> int:
    """Display percentage (0-100) for the bucketed score."""
    return int(round(score(reference, candidate) * 100))


def calculate_similarity(user_answer: str, correct_answer: str) -> int:
    """Return integer similarity percentage of the user's answer."""
    return score_percent(correct_answer, user_answer)


def classify_score(similarity: int) -> int:
    """Map a 0-100 similarity to a recall class: 0 wrong, 1 partial, 2 correct."""
    if similarity >= 100:
        return 2
    if similarity <= 0:
        return 0
    return 1
