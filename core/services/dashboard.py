"""
Dashboard assembly.

Composes the independent reductions (windowing, severity classification,
frequency ranking, risk) into one snapshot. Everything here is a pure function
of already-fetched collections: no I/O, no clock reads, no shared state, so
identical inputs always produce identical snapshots.
"""

from collections.abc import Sequence
from datetime import UTC, date, tzinfo
from typing import TypeVar

import structlog

from core.domain.models import (
    DashboardSnapshot,
    HealthSummary,
    MedicalHistorySnapshot,
    PurchaseRecord,
    PurchaseSummary,
    ReminderKind,
    ReminderRecord,
    SymptomEntry,
)
from core.services.frequency import top_frequencies
from core.services.risk import health_risk, most_recent
from core.services.severity import average_severity_label
from core.services.windowing import entry_day, rolling_window, severity_window

logger = structlog.get_logger(__name__)

DASHBOARD_WINDOW_DAYS = 7
TOP_SYMPTOMS_LIMIT = 5
RECENT_PURCHASES_LIMIT = 10
RECENT_SUMMARY_LIMIT = 10

UNKNOWN_PURCHASE_NAME = "Unknown"


def summarize_purchase(purchase: PurchaseRecord, tz: tzinfo = UTC) -> PurchaseSummary:
    """Collapse an order into one display row: names, total quantity, date, total price."""
    names = ", ".join(item.name for item in purchase.items)
    return PurchaseSummary(
        name=names or UNKNOWN_PURCHASE_NAME,
        quantity=sum(item.quantity for item in purchase.items),
        date=entry_day(purchase.created_at, tz).isoformat(),
        price=round(sum(item.unit_price * item.quantity for item in purchase.items), 2),
    )


def summarize_purchases(
    purchases: Sequence[PurchaseRecord],
    limit: int = RECENT_PURCHASES_LIMIT,
    tz: tzinfo = UTC,
) -> list[PurchaseSummary]:
    """Summaries of the ``limit`` most recently created purchases, newest first."""
    recent = sorted(purchases, key=lambda p: p.created_at, reverse=True)[:limit]
    return [summarize_purchase(purchase, tz) for purchase in recent]


RecordT = TypeVar("RecordT", SymptomEntry, PurchaseRecord, ReminderRecord)


def owned_by(records: Sequence[RecordT], owner_id: str) -> list[RecordT]:
    """Records belonging to ``owner_id``; records of any other owner are dropped."""
    owned = [record for record in records if record.owner_id == owner_id]
    if len(owned) != len(records):
        logger.warning(
            "foreign_records_dropped",
            owner_id=owner_id,
            dropped=len(records) - len(owned),
            record_type=type(records[0]).__name__,
        )
    return owned


def owned_history(
    history: MedicalHistorySnapshot | None, owner_id: str
) -> MedicalHistorySnapshot | None:
    if history is None or history.owner_id == owner_id:
        return history
    logger.warning(
        "foreign_records_dropped",
        owner_id=owner_id,
        dropped=1,
        record_type=type(history).__name__,
    )
    return None


def assemble_dashboard(
    symptom_entries: Sequence[SymptomEntry],
    purchases: Sequence[PurchaseRecord],
    reminders: Sequence[ReminderRecord],
    history: MedicalHistorySnapshot | None,
    anchor_date: date,
    tz: tzinfo = UTC,
    *,
    owner_id: str | None = None,
) -> DashboardSnapshot:
    """
    Build the dashboard snapshot for one owner.

    Args:
        symptom_entries: All symptom entries of the owner
        purchases: All purchase records of the owner
        reminders: All reminders of the owner
        history: The owner's medical history, if recorded
        anchor_date: The "today" the trailing windows end on
        tz: Timezone used to cut timestamps into calendar days
        owner_id: When given, records of any other owner are excluded before
            aggregation. Without it the caller guarantees the inputs are
            already scoped to one owner.

    Returns:
        DashboardSnapshot: Immutable snapshot; serialize with ``by_alias=True``
        for the camelCase response contract.
    """
    if owner_id is not None:
        symptom_entries = owned_by(symptom_entries, owner_id)
        purchases = owned_by(purchases, owner_id)
        reminders = owned_by(reminders, owner_id)
        history = owned_history(history, owner_id)

    snapshot = DashboardSnapshot(
        total_symptom_count=len(symptom_entries),
        average_severity_label=average_severity_label(symptom_entries),
        purchase_count=len(purchases),
        appointment_count=sum(1 for r in reminders if r.kind == ReminderKind.APPOINTMENT),
        daily_trend=rolling_window(symptom_entries, anchor_date, DASHBOARD_WINDOW_DAYS, tz),
        severity_trend=severity_window(symptom_entries, anchor_date, DASHBOARD_WINDOW_DAYS, tz),
        top_symptoms=top_frequencies(symptom_entries, TOP_SYMPTOMS_LIMIT),
        recent_purchases=summarize_purchases(purchases, RECENT_PURCHASES_LIMIT, tz),
        health_risk=health_risk(history, symptom_entries),
    )

    logger.debug(
        "dashboard_snapshot_built",
        anchor_date=anchor_date.isoformat(),
        total_symptoms=snapshot.total_symptom_count,
        health_risk=snapshot.health_risk.value,
    )
    return snapshot


def build_health_summary(
    history: MedicalHistorySnapshot | None,
    symptom_entries: Sequence[SymptomEntry],
    *,
    owner_id: str | None = None,
) -> HealthSummary:
    """Medical-history overview plus the risk label over the latest entries."""
    if owner_id is not None:
        symptom_entries = owned_by(symptom_entries, owner_id)
        history = owned_history(history, owner_id)
    recent = most_recent(symptom_entries, RECENT_SUMMARY_LIMIT)

    def _or_default(value: str | None, default: str) -> str:
        return value if value and value.strip() else default

    return HealthSummary(
        blood_group=_or_default(history and history.blood_group, "Not recorded"),
        allergies=_or_default(history and history.allergies, "None"),
        chronic_conditions=_or_default(history and history.chronic_conditions, "None"),
        recent_symptom_count=len(recent),
        health_risk_level=health_risk(history, recent),
        last_updated=history.updated_at if history else None,
    )
