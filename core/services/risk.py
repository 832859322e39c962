"""
Coarse health-risk classification.

Combines the severity of the most recent symptom reports with static
medical-history flags (chronic conditions, allergies).
"""

from collections.abc import Iterable

from core.domain.models import MedicalHistorySnapshot, RiskLevel, Severity, SymptomEntry
from core.services.severity import entry_severity

RISK_WINDOW = 5


def most_recent(entries: Iterable[SymptomEntry], limit: int) -> list[SymptomEntry]:
    """Entries ordered newest first, truncated to ``limit``."""
    return sorted(entries, key=lambda e: e.created_at, reverse=True)[:limit]


def has_risk_flags(history: MedicalHistorySnapshot | None) -> bool:
    if history is None:
        return False
    return bool(history.chronic_conditions.strip() or history.allergies.strip())


def health_risk(
    history: MedicalHistorySnapshot | None, entries: Iterable[SymptomEntry]
) -> RiskLevel:
    """
    Classify health risk from the five most recent entries and medical history.

    High if any recent entry is severe. Medium if the history carries a chronic
    condition or allergy and any recent entry is moderate. Low otherwise,
    including when there is no history or no entries at all.
    """
    recent = {entry_severity(e) for e in most_recent(entries, RISK_WINDOW)}

    if Severity.SEVERE in recent:
        return RiskLevel.HIGH
    if has_risk_flags(history) and Severity.MODERATE in recent:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
