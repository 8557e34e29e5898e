"""
Bounded edit distance for fuzzy card name matching.

Classic Levenshtein distance (unit-cost insert, delete, substitute) from
rapidfuzz, with the length-based acceptance thresholds used by the matcher.
"""

from rapidfuzz.distance import Levenshtein

from deckmatch.config import (
    FUZZY_LENGTH_WINDOW,
    LONG_QUERY_MAX_DISTANCE,
    SHORT_QUERY_MAX_DISTANCE,
    SHORT_QUERY_MAX_LENGTH,
)


def distance(a: str, b: str) -> int:
    """
    Return the edit distance between two strings.

    Symmetric, and zero only when a == b.
    """
    return Levenshtein.distance(a, b)


def max_distance_for(query: str) -> int:
    """Largest edit distance accepted for a query of this length."""
    if len(query) <= SHORT_QUERY_MAX_LENGTH:
        return SHORT_QUERY_MAX_DISTANCE
    return LONG_QUERY_MAX_DISTANCE


def within_length_window(query: str, key: str) -> bool:
    """Cheap pre-filter: skip keys whose length cannot be close enough."""
    return abs(len(query) - len(key)) <= FUZZY_LENGTH_WINDOW


def bounded_distance(query: str, key: str) -> int | None:
    """
    Return the distance if the key is an acceptable fuzzy match, else None.

    Applies the length pre-filter, then the length-based threshold.
    """
    if not within_length_window(query, key):
        return None
    limit = max_distance_for(query)
    # Past the cutoff rapidfuzz stops early and reports limit + 1
    dist = Levenshtein.distance(query, key, score_cutoff=limit)
    if dist > limit:
        return None
    return dist
