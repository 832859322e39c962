"""Symptom frequency ranking."""

from collections import Counter
from collections.abc import Iterable

from core.domain.models import FrequencyEntry, SymptomEntry

DEFAULT_TOP_K = 5


def count_symptoms(entries: Iterable[SymptomEntry]) -> Counter[str]:
    """Count every symptom label instance across multi-valued entries."""
    counts: Counter[str] = Counter()
    for entry in entries:
        counts.update(entry.symptoms)
    return counts


def top_frequencies(entries: Iterable[SymptomEntry], k: int = DEFAULT_TOP_K) -> list[FrequencyEntry]:
    """
    Rank symptom labels by occurrence count.

    Sorted by count descending; ties are broken by label ascending so the
    ranking is stable across calls and storage orderings.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")

    ranked = sorted(count_symptoms(entries).items(), key=lambda item: (-item[1], item[0]))
    return [FrequencyEntry(name=name, value=count) for name, count in ranked[:k]]
