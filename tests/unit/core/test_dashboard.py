"""
Tests for dashboard assembly in `core/services/dashboard.py`.

Covers:
- The camelCase response contract and its field types
- Composition of counts, trends, rankings and risk
- Recent purchase summaries
- Health summary defaults
- Idempotence of repeated assembly
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from core.domain.models import (
    DashboardSnapshot,
    LineItem,
    MedicalHistorySnapshot,
    PurchaseRecord,
    ReminderKind,
    ReminderRecord,
    RiskLevel,
    SeverityLabel,
    SymptomEntry,
)
from core.services.dashboard import (
    assemble_dashboard,
    build_health_summary,
    summarize_purchase,
    summarize_purchases,
)

ANCHOR = date(2024, 3, 10)
NOON = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)

CONTRACT_FIELDS = {
    "totalSymptomCount",
    "averageSeverityLabel",
    "purchaseCount",
    "appointmentCount",
    "dailyTrend",
    "severityTrend",
    "topSymptoms",
    "recentPurchases",
    "healthRisk",
}


@pytest.fixture
def symptom_entries() -> list[SymptomEntry]:
    return [
        SymptomEntry(
            owner_id="user-1",
            symptoms=["fever", "cough"],
            severity="moderate",
            created_at=NOON - timedelta(days=1),
        ),
        SymptomEntry(
            owner_id="user-1",
            symptoms=["fever"],
            severity="severe",
            created_at=NOON,
        ),
        SymptomEntry(
            owner_id="user-1",
            symptoms=["headache"],
            severity="mild",
            created_at=NOON - timedelta(days=20),
        ),
    ]


@pytest.fixture
def purchases() -> list[PurchaseRecord]:
    return [
        PurchaseRecord(
            owner_id="user-1",
            items=[
                LineItem(name="Paracetamol", unit_price=20.0, quantity=2),
                LineItem(name="Cough Syrup", unit_price=85.5, quantity=1),
            ],
            created_at=NOON - timedelta(days=i),
        )
        for i in range(12)
    ]


@pytest.fixture
def reminders() -> list[ReminderRecord]:
    return [
        ReminderRecord(owner_id="user-1", kind=ReminderKind.APPOINTMENT, title="GP visit"),
        ReminderRecord(owner_id="user-1", kind=ReminderKind.APPOINTMENT, title="Dentist"),
        ReminderRecord(owner_id="user-1", kind=ReminderKind.MEDICINE, title="Vitamin D"),
        ReminderRecord(owner_id="user-1", kind=ReminderKind.CHECKUP, title="Blood test"),
    ]


@pytest.fixture
def snapshot(
    symptom_entries: list[SymptomEntry],
    purchases: list[PurchaseRecord],
    reminders: list[ReminderRecord],
) -> DashboardSnapshot:
    return assemble_dashboard(symptom_entries, purchases, reminders, None, ANCHOR)


class TestAssembleDashboard:
    def test_response_contract_fields(self, snapshot: DashboardSnapshot) -> None:
        payload = snapshot.model_dump(mode="json", by_alias=True)

        assert set(payload) == CONTRACT_FIELDS
        assert set(payload["dailyTrend"][0]) == {"date", "symptoms", "severity"}
        assert set(payload["severityTrend"][0]) == {"date", "mild", "moderate", "severe"}
        assert set(payload["topSymptoms"][0]) == {"name", "value"}
        assert set(payload["recentPurchases"][0]) == {"name", "quantity", "date", "price"}
        assert payload["averageSeverityLabel"] in {"N/A", "Low", "Medium", "High"}
        assert payload["healthRisk"] in {"Low", "Medium", "High"}

    def test_counts(self, snapshot: DashboardSnapshot) -> None:
        assert snapshot.total_symptom_count == 3
        assert snapshot.purchase_count == 12
        assert snapshot.appointment_count == 2
        # (2 + 3 + 1) / 3 == 2.0
        assert snapshot.average_severity_label == SeverityLabel.MEDIUM

    def test_trends_cover_seven_days(self, snapshot: DashboardSnapshot) -> None:
        assert len(snapshot.daily_trend) == 7
        assert len(snapshot.severity_trend) == 7
        assert snapshot.daily_trend[-1].date == "2024-03-10"
        assert snapshot.daily_trend[-1].severity == 3
        assert snapshot.daily_trend[-2].symptoms == 1
        assert snapshot.severity_trend[-2].moderate == 1
        # The 20-day-old entry falls outside the window
        assert sum(b.symptoms for b in snapshot.daily_trend) == 2

    def test_top_symptoms(self, snapshot: DashboardSnapshot) -> None:
        assert [(f.name, f.value) for f in snapshot.top_symptoms] == [
            ("fever", 2),
            ("cough", 1),
            ("headache", 1),
        ]

    def test_recent_purchases_are_newest_ten(self, snapshot: DashboardSnapshot) -> None:
        assert len(snapshot.recent_purchases) == 10
        assert snapshot.recent_purchases[0].date == "2024-03-10"
        assert snapshot.recent_purchases[-1].date == "2024-03-01"

    def test_health_risk(self, snapshot: DashboardSnapshot) -> None:
        assert snapshot.health_risk == RiskLevel.HIGH

    def test_empty_inputs(self) -> None:
        snapshot = assemble_dashboard([], [], [], None, ANCHOR)

        assert snapshot.total_symptom_count == 0
        assert snapshot.average_severity_label == SeverityLabel.NOT_AVAILABLE
        assert snapshot.purchase_count == 0
        assert snapshot.appointment_count == 0
        assert len(snapshot.daily_trend) == 7
        assert all(b.symptoms == 0 for b in snapshot.daily_trend)
        assert snapshot.top_symptoms == []
        assert snapshot.recent_purchases == []
        assert snapshot.health_risk == RiskLevel.LOW

    def test_repeated_assembly_is_byte_identical(
        self,
        symptom_entries: list[SymptomEntry],
        purchases: list[PurchaseRecord],
        reminders: list[ReminderRecord],
    ) -> None:
        history = MedicalHistorySnapshot(owner_id="user-1", allergies="pollen")

        first = assemble_dashboard(symptom_entries, purchases, reminders, history, ANCHOR)
        second = assemble_dashboard(symptom_entries, purchases, reminders, history, ANCHOR)

        assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)

    def test_snapshot_is_immutable(self, snapshot: DashboardSnapshot) -> None:
        with pytest.raises(ValueError, match="frozen"):
            snapshot.total_symptom_count = 99  # type: ignore[misc]

    def test_records_of_other_owners_are_excluded(
        self,
        symptom_entries: list[SymptomEntry],
        purchases: list[PurchaseRecord],
        reminders: list[ReminderRecord],
        snapshot: DashboardSnapshot,
    ) -> None:
        other_symptoms = [
            SymptomEntry(owner_id="user-2", symptoms=["rash"], severity="severe", created_at=NOON)
        ]
        other_purchases = [PurchaseRecord(owner_id="user-2", created_at=NOON)]
        other_reminders = [ReminderRecord(owner_id="user-2", kind=ReminderKind.APPOINTMENT)]
        other_history = MedicalHistorySnapshot(owner_id="user-2", allergies="latex")

        mixed = assemble_dashboard(
            symptom_entries + other_symptoms,
            other_purchases + purchases,
            reminders + other_reminders,
            other_history,
            ANCHOR,
            owner_id="user-1",
        )

        assert mixed.model_dump_json(by_alias=True) == snapshot.model_dump_json(by_alias=True)
        assert "rash" not in {entry.name for entry in mixed.top_symptoms}

    def test_moderate_risk_uses_only_the_owners_history(self) -> None:
        entries = [SymptomEntry(owner_id="user-1", severity="moderate", created_at=NOON)]
        history = MedicalHistorySnapshot(owner_id="user-2", chronic_conditions="asthma")

        merged = assemble_dashboard(entries, [], [], history, ANCHOR)
        scoped = assemble_dashboard(entries, [], [], history, ANCHOR, owner_id="user-1")

        assert merged.health_risk == RiskLevel.MEDIUM
        assert scoped.health_risk == RiskLevel.LOW


class TestPurchaseSummaries:
    def test_summary_totals(self, purchases: list[PurchaseRecord]) -> None:
        summary = summarize_purchase(purchases[0])

        assert summary.name == "Paracetamol, Cough Syrup"
        assert summary.quantity == 3
        assert summary.date == "2024-03-10"
        assert summary.price == pytest.approx(125.5)

    def test_order_without_items(self) -> None:
        summary = summarize_purchase(PurchaseRecord(owner_id="user-1", created_at=NOON))

        assert summary.name == "Unknown"
        assert summary.quantity == 0
        assert summary.price == 0.0

    def test_sorted_by_creation_time(self, purchases: list[PurchaseRecord]) -> None:
        summaries = summarize_purchases(list(reversed(purchases)), limit=3)

        assert [s.date for s in summaries] == ["2024-03-10", "2024-03-09", "2024-03-08"]


class TestHealthSummary:
    def test_defaults_without_history(self) -> None:
        summary = build_health_summary(None, [])

        assert summary.blood_group == "Not recorded"
        assert summary.allergies == "None"
        assert summary.chronic_conditions == "None"
        assert summary.recent_symptom_count == 0
        assert summary.health_risk_level == RiskLevel.LOW
        assert summary.last_updated is None

    def test_with_history(self, symptom_entries: list[SymptomEntry]) -> None:
        updated = datetime(2024, 2, 1, tzinfo=UTC)
        history = MedicalHistorySnapshot(
            owner_id="user-1",
            blood_group="B+",
            chronic_conditions="diabetes",
            updated_at=updated,
        )

        summary = build_health_summary(history, symptom_entries)

        assert summary.blood_group == "B+"
        assert summary.allergies == "None"
        assert summary.chronic_conditions == "diabetes"
        assert summary.recent_symptom_count == 3
        assert summary.health_risk_level == RiskLevel.HIGH
        assert summary.last_updated == updated

    def test_recent_count_is_capped_at_ten(self) -> None:
        entries = [
            SymptomEntry(owner_id="user-1", symptoms=["cough"], created_at=NOON - timedelta(hours=i))
            for i in range(15)
        ]

        assert build_health_summary(None, entries).recent_symptom_count == 10

    def test_null_history_fields_use_defaults(self) -> None:
        history = MedicalHistorySnapshot(
            owner_id="user-1", blood_group=None, allergies=None, chronic_conditions=None
        )

        summary = build_health_summary(history, [])

        assert summary.blood_group == "Not recorded"
        assert summary.allergies == "None"
        assert summary.chronic_conditions == "None"
        assert summary.health_risk_level == RiskLevel.LOW

    def test_other_owners_are_excluded(self, symptom_entries: list[SymptomEntry]) -> None:
        other = SymptomEntry(owner_id="user-2", symptoms=["rash"], created_at=NOON)
        history = MedicalHistorySnapshot(owner_id="user-2", blood_group="AB-")

        summary = build_health_summary(history, [*symptom_entries, other], owner_id="user-1")

        assert summary.blood_group == "Not recorded"
        assert summary.recent_symptom_count == 3
