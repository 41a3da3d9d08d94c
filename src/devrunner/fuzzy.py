# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Levenshtein-based "did you mean" suggestions for mistyped scripts."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

SUGGESTION_THRESHOLD: Final[float] = 0.5


def levenshtein_distance(left: str, right: str) -> int:
    """Return the edit distance between *left* and *right*."""

    if not left:
        return len(right)
    if not right:
        return len(left)
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity_score(left: str, right: str) -> float:
    """Return ``1 - distance / longest`` (``1.0`` for two empty strings)."""

    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(left, right) / longest


def find_similar(candidate: str, available: Sequence[str], threshold: float) -> list[tuple[str, float]]:
    """Return ``(name, score)`` pairs at or above *threshold*, best first."""

    lowered = candidate.lower()
    scored = [(name, similarity_score(lowered, name.lower())) for name in available]
    matches = [entry for entry in scored if entry[1] >= threshold]
    matches.sort(key=lambda entry: entry[1], reverse=True)
    return matches


def suggest(candidate: str, available: Sequence[str]) -> str | None:
    matches = find_similar(candidate, available, SUGGESTION_THRESHOLD)
    return matches[0][0] if matches else None


def is_exact_match(candidate: str, available: Sequence[str]) -> bool:
    lowered = candidate.lower()
    return any(name.lower() == lowered for name in available)


__all__ = ["find_similar", "is_exact_match", "levenshtein_distance", "similarity_score", "suggest"]
