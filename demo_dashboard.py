"""
End-to-end walkthrough of the dashboard analytics pipeline.

This script exercises:
1. Configuration loading and validation
2. Dashboard aggregation from an in-memory store
3. Sparse symptom trends and the health summary
4. Classification of store failures

Run with: uv run python demo_dashboard.py
"""

import asyncio
from datetime import UTC, date, datetime, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from core.config import get_config, print_config_summary, validate_config
from core.domain.models import (
    LineItem,
    MedicalHistorySnapshot,
    PurchaseRecord,
    ReminderKind,
    ReminderRecord,
    SymptomEntry,
)
from core.log_setup import configure_logging
from core.services.dashboard_service import DashboardService
from core.services.store import InMemoryHealthStore

console = Console()

OWNER_ID = "demo-user"
ANCHOR = date(2024, 3, 10)


class UnavailableStore(InMemoryHealthStore):
    """Store whose symptom queries always fail, as if the database were down."""

    async def fetch_symptom_entries(self, owner_id: str) -> list[SymptomEntry]:
        raise ConnectionError("database unreachable")


def build_demo_store() -> InMemoryHealthStore:
    """Populate a store with a week of mixed-vocabulary records."""
    store = InMemoryHealthStore()
    noon = datetime(ANCHOR.year, ANCHOR.month, ANCHOR.day, 12, 0, tzinfo=UTC)

    scenario = [
        (0, ["fever", "cough"], "severe", "Could not sleep"),
        (1, ["fever"], "moderate", ""),
        (1, ["headache"], "medium", "Logged offline"),
        (3, ["cough", "sore throat"], "mild", ""),
        (5, ["headache"], "low", "Logged offline"),
        (12, ["rash"], "mild", "Old entry"),
    ]
    for days_ago, symptoms, severity, notes in scenario:
        store.add_symptom_entry(
            SymptomEntry(
                owner_id=OWNER_ID,
                symptoms=symptoms,
                severity=severity,
                notes=notes,
                created_at=noon - timedelta(days=days_ago),
            )
        )

    store.add_purchase(
        PurchaseRecord(
            owner_id=OWNER_ID,
            items=[
                LineItem(name="Paracetamol 500mg", unit_price=25.0, quantity=2),
                LineItem(name="Cough Syrup", unit_price=90.0, quantity=1),
            ],
            created_at=noon - timedelta(days=1),
        )
    )
    store.add_reminder(ReminderRecord(owner_id=OWNER_ID, kind=ReminderKind.APPOINTMENT))
    store.add_reminder(ReminderRecord(owner_id=OWNER_ID, kind=ReminderKind.MEDICINE))
    store.set_medical_history(
        MedicalHistorySnapshot(owner_id=OWNER_ID, blood_group="O+", chronic_conditions="asthma")
    )
    return store


def check_configuration() -> bool:
    """Check configuration loading."""
    console.print(Panel("🔧 Checking Configuration", style="blue"))

    try:
        validate_config()
        print_config_summary()
        return True
    except Exception as e:
        console.print(f"❌ Configuration check failed: {e}", style="red")
        return False


async def check_dashboard(service: DashboardService) -> bool:
    """Aggregate and display the dashboard snapshot."""
    console.print(Panel("📊 Dashboard Snapshot", style="blue"))

    result = await service.dashboard(OWNER_ID, ANCHOR)
    if result.is_err():
        console.print(f"❌ Dashboard failed: {result.unwrap_err()}", style="red")
        return False

    snapshot = result.unwrap()

    summary_table = Table(title="Summary")
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="white")
    summary_table.add_row("Total Symptoms", str(snapshot.total_symptom_count))
    summary_table.add_row("Average Severity", snapshot.average_severity_label.value)
    summary_table.add_row("Purchases", str(snapshot.purchase_count))
    summary_table.add_row("Appointments", str(snapshot.appointment_count))
    summary_table.add_row("Health Risk", snapshot.health_risk.value)
    console.print(summary_table)

    trend_table = Table(title="Last 7 Days")
    trend_table.add_column("Date", style="cyan")
    trend_table.add_column("Symptoms", style="magenta")
    trend_table.add_column("Score", style="green")
    trend_table.add_column("Mild / Moderate / Severe", style="yellow")
    for bucket, breakdown in zip(snapshot.daily_trend, snapshot.severity_trend, strict=True):
        trend_table.add_row(
            bucket.date,
            str(bucket.symptoms),
            str(bucket.severity),
            f"{breakdown.mild} / {breakdown.moderate} / {breakdown.severe}",
        )
    console.print(trend_table)

    top = ", ".join(f"{f.name} ({f.value})" for f in snapshot.top_symptoms)
    console.print(f"Top symptoms: {top}")
    return True


async def check_trends_and_summary(service: DashboardService) -> bool:
    """Display the sparse trend and the health summary."""
    console.print(Panel("📈 Symptom Trends & Health Summary", style="blue"))

    report = (await service.symptom_trends(OWNER_ID, 30, ANCHOR)).unwrap()
    console.print(f"Period: {report.period}, entries: {report.total_symptoms}")
    for day in report.trends:
        names = "; ".join(s.name for s in day.symptoms)
        console.print(f"  {day.date}  x{day.count}  {day.avg_severity.value:<6}  {names}")

    summary = (await service.health_summary(OWNER_ID)).unwrap()
    console.print(
        f"Blood group {summary.blood_group}, chronic conditions: {summary.chronic_conditions}, "
        f"risk {summary.health_risk_level.value}"
    )
    return True


async def check_error_handling() -> bool:
    """A failing store must yield a classified error, never a partial snapshot."""
    console.print(Panel("🛡️ Checking Error Handling", style="blue"))

    service = DashboardService(UnavailableStore(), get_config())
    result = await service.dashboard(OWNER_ID, ANCHOR)

    if result.is_err():
        console.print(f"✅ Classified failure: {result.unwrap_err()}", style="green")
        return True
    console.print("❌ Failing store produced a snapshot", style="red")
    return False


async def main() -> None:
    config = get_config()
    configure_logging(config.logging)

    service = DashboardService(build_demo_store(), config)
    checks = [
        check_configuration(),
        await check_dashboard(service),
        await check_trends_and_summary(service),
        await check_error_handling(),
    ]

    passed = sum(checks)
    style = "green" if passed == len(checks) else "red"
    console.print(Panel(f"{passed}/{len(checks)} checks passed", style=style))


if __name__ == "__main__":
    asyncio.run(main())
