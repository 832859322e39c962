"""
Severity normalization and classification.

Symptom entries reach the engine from two data paths with different severity
vocabularies: the server store writes mild/moderate/severe and the
client-local store writes low/medium/high. Both are mapped onto one internal
scale here so every downstream reduction shares the same weights and
thresholds.
"""

from collections.abc import Iterable

from core.domain.models import Severity, SeverityLabel, SymptomEntry

SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.MILD: 1,
    Severity.MODERATE: 2,
    Severity.SEVERE: 3,
}

HIGH_SEVERITY_THRESHOLD = 2.5
MEDIUM_SEVERITY_THRESHOLD = 1.5

_SEVERITY_ALIASES: dict[str, Severity] = {
    "mild": Severity.MILD,
    "moderate": Severity.MODERATE,
    "severe": Severity.SEVERE,
    "low": Severity.MILD,
    "medium": Severity.MODERATE,
    "high": Severity.SEVERE,
}


def normalize_severity(raw: object) -> Severity:
    """
    Map a raw severity value onto the internal scale.

    Unknown, missing or non-string values fall back to mild instead of being rejected.
    """
    if isinstance(raw, Severity):
        return raw
    if not isinstance(raw, str):
        return Severity.MILD
    return _SEVERITY_ALIASES.get(raw.strip().lower(), Severity.MILD)


def severity_weight(raw: object) -> int:
    return SEVERITY_WEIGHTS[normalize_severity(raw)]


def entry_severity(entry: SymptomEntry) -> Severity:
    return normalize_severity(entry.severity)


def label_for_average(average: float) -> SeverityLabel:
    if average >= HIGH_SEVERITY_THRESHOLD:
        return SeverityLabel.HIGH
    if average >= MEDIUM_SEVERITY_THRESHOLD:
        return SeverityLabel.MEDIUM
    return SeverityLabel.LOW


def average_severity_label(entries: Iterable[SymptomEntry]) -> SeverityLabel:
    """
    Reduce entries to one severity label from their mean weight.

    Returns N/A only for an empty collection; no entry is ever excluded.
    """
    weights = [severity_weight(entry.severity) for entry in entries]
    if not weights:
        return SeverityLabel.NOT_AVAILABLE
    return label_for_average(sum(weights) / len(weights))
