"""
Dashboard service: fetch an owner's collections, then aggregate.

This is the end-to-end path behind the dashboard endpoints:
1. Fetch the input collections concurrently from the health store
2. Run the synchronous, pure aggregation over the fetched collections
3. Surface store failures as one classified condition

The store fetch is the only suspension point. Aggregation is all-or-nothing:
if any fetch fails or times out, no part of the response is computed.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import Any

import structlog
from pydantic import BaseModel, Field

from core.config import MAX_TREND_DAYS, AppConfig, get_config
from core.domain.models import DashboardSnapshot, HealthSummary, SymptomTrendReport
from core.services.dashboard import assemble_dashboard, build_health_summary
from core.services.store import HealthStore, Result
from core.services.windowing import entries_in_window, sparse_trend

logger = structlog.get_logger(__name__)


class AggregationUnavailableError(Exception):
    """The owner's records could not be read, so no aggregate was produced."""

    def __init__(self, owner_id: str, reason: str) -> None:
        super().__init__(f"Aggregation unavailable for owner {owner_id}: {reason}")
        self.owner_id = owner_id
        self.reason = reason


class TrendQuery(BaseModel):
    """Validated parameters of a symptom trend query."""

    days: int = Field(default=30, ge=1, le=MAX_TREND_DAYS)


Fetcher = Callable[[str], Awaitable[Any]]


class DashboardService:
    """
    Serves dashboard, symptom-trend and health-summary aggregates for one owner at a time.

    Design principles:
    - The store is injected (server database or client-local storage)
    - No state is kept between calls; concurrent calls are independent
    - "Today" is resolved here, at the edge, and handed to the engine explicitly
    """

    def __init__(self, store: HealthStore, config: AppConfig | None = None) -> None:
        self.store = store
        self.config = config or get_config()
        self.logger = logger.bind(component="dashboard_service")

    def resolve_anchor_date(self, anchor_date: date | None = None) -> date:
        """Use the caller's anchor date, or today in the configured timezone."""
        if anchor_date is not None:
            return anchor_date
        return datetime.now(self.config.analytics.tzinfo).date()

    async def _fetch(self, owner_id: str, fetchers: dict[str, Fetcher]) -> dict[str, Any]:
        """
        Run the given store queries concurrently under one timeout.

        Raises:
            AggregationUnavailableError: If any query fails or the timeout expires.
        """
        timeout = self.config.store.fetch_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                async with asyncio.TaskGroup() as task_group:
                    tasks = {
                        name: task_group.create_task(fetch(owner_id), name=name)
                        for name, fetch in fetchers.items()
                    }
        except TimeoutError as e:
            self.logger.warning("store_fetch_timeout", owner_id=owner_id, timeout_seconds=timeout)
            raise AggregationUnavailableError(owner_id, f"store timed out after {timeout}s") from e
        except ExceptionGroup as eg:
            cause = eg.exceptions[0]
            self.logger.error(
                "store_fetch_failed",
                owner_id=owner_id,
                error=str(cause),
                error_type=type(cause).__name__,
            )
            raise AggregationUnavailableError(owner_id, str(cause)) from cause

        return {name: task.result() for name, task in tasks.items()}

    async def dashboard(
        self, owner_id: str, anchor_date: date | None = None
    ) -> Result[DashboardSnapshot, AggregationUnavailableError]:
        """Full dashboard snapshot with the fixed 7-day window."""
        anchor = self.resolve_anchor_date(anchor_date)
        try:
            inputs = await self._fetch(
                owner_id,
                {
                    "symptoms": self.store.fetch_symptom_entries,
                    "purchases": self.store.fetch_purchases,
                    "reminders": self.store.fetch_reminders,
                    "history": self.store.fetch_medical_history,
                },
            )
        except AggregationUnavailableError as e:
            return Result.err(e)

        snapshot = assemble_dashboard(
            inputs["symptoms"],
            inputs["purchases"],
            inputs["reminders"],
            inputs["history"],
            anchor,
            self.config.analytics.tzinfo,
            owner_id=owner_id,
        )
        self.logger.info(
            "dashboard_assembled",
            owner_id=owner_id,
            anchor_date=anchor.isoformat(),
            total_symptoms=snapshot.total_symptom_count,
            health_risk=snapshot.health_risk.value,
        )
        return Result.ok(snapshot)

    async def symptom_trends(
        self, owner_id: str, days: int | None = None, anchor_date: date | None = None
    ) -> Result[SymptomTrendReport, AggregationUnavailableError]:
        """
        Sparse symptom trend over the trailing ``days`` (1 to 3650).

        Raises:
            pydantic.ValidationError: If ``days`` is out of bounds.
        """
        query = TrendQuery(days=days if days is not None else self.config.analytics.default_trend_days)
        anchor = self.resolve_anchor_date(anchor_date)
        tz = self.config.analytics.tzinfo
        try:
            inputs = await self._fetch(owner_id, {"symptoms": self.store.fetch_symptom_entries})
        except AggregationUnavailableError as e:
            return Result.err(e)

        in_window = entries_in_window(inputs["symptoms"], anchor, query.days, tz)
        report = SymptomTrendReport(
            period=f"{query.days} days",
            anchor_date=anchor,
            total_symptoms=len(in_window),
            trends=sparse_trend(in_window, anchor, query.days, tz),
        )
        self.logger.info(
            "symptom_trends_assembled",
            owner_id=owner_id,
            days=query.days,
            active_days=len(report.trends),
        )
        return Result.ok(report)

    async def health_summary(
        self, owner_id: str
    ) -> Result[HealthSummary, AggregationUnavailableError]:
        """Medical-history overview with the risk label over the latest entries."""
        try:
            inputs = await self._fetch(
                owner_id,
                {
                    "symptoms": self.store.fetch_symptom_entries,
                    "history": self.store.fetch_medical_history,
                },
            )
        except AggregationUnavailableError as e:
            return Result.err(e)

        summary = build_health_summary(inputs["history"], inputs["symptoms"], owner_id=owner_id)
        self.logger.info(
            "health_summary_assembled",
            owner_id=owner_id,
            health_risk=summary.health_risk_level.value,
        )
        return Result.ok(summary)
