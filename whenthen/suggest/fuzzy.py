"""Typo-tolerant phrase matching."""

from __future__ import annotations

MAX_WINDOW_WORDS = 4


def levenshtein(a: str, b: str) -> int:
    """Edit distance between *a* and *b* (insert, delete, substitute all cost 1)."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        curr = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            curr[j] = min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost)
        prev = curr
    return prev[-1]


def fuzzy_contains(text: str, phrase: str, max_distance: int = 2) -> bool:
    """True if a run of 1-4 consecutive words in *text* is within *max_distance* of *phrase*.

    Windows whose length differs from the phrase by more than
    *max_distance* are skipped without computing the distance.
    """
    words = text.split()
    target = len(phrase)
    for start in range(len(words)):
        candidate = ""
        for word in words[start : start + MAX_WINDOW_WORDS]:
            candidate = f"{candidate} {word}" if candidate else word
            if abs(len(candidate) - target) > max_distance:
                continue
            if levenshtein(candidate, phrase) <= max_distance:
                return True
    return False
