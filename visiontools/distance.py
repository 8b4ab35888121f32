"""Levenshtein edit distance and picking the most typical string of a set."""

from __future__ import annotations

from collections.abc import Sequence


def edit_distance(a: str, b: str) -> int:
    """Number of insertions, deletions and substitutions that turn ``a`` into ``b``."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def most_representative(strs: Sequence[str]) -> str:
    """The string with the smallest sum of squared edit distances to all the others.

    Ties go to the earliest string.
    """
    if not strs:
        raise ValueError("no strings given")
    best_score = None
    best = strs[0]
    for i, candidate in enumerate(strs):
        score = sum(
            edit_distance(candidate, other) ** 2
            for j, other in enumerate(strs)
            if i != j
        )
        if best_score is None or score < best_score:
            best_score = score
            best = candidate
    return best