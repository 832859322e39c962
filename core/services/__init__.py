"""
Core services for the application.

This package contains the analytics engine (severity, windowing, frequency,
risk, dashboard assembly), the store boundary and the dashboard service.
"""

from .dashboard import assemble_dashboard, build_health_summary, summarize_purchases
from .dashboard_service import AggregationUnavailableError, DashboardService, TrendQuery
from .frequency import top_frequencies
from .risk import health_risk
from .severity import average_severity_label, normalize_severity
from .store import HealthStore, InMemoryHealthStore, Result
from .windowing import rolling_window, severity_window, sparse_trend

__all__ = [
    "AggregationUnavailableError",
    "DashboardService",
    "HealthStore",
    "InMemoryHealthStore",
    "Result",
    "TrendQuery",
    "assemble_dashboard",
    "average_severity_label",
    "build_health_summary",
    "health_risk",
    "normalize_severity",
    "rolling_window",
    "severity_window",
    "sparse_trend",
    "summarize_purchases",
    "top_frequencies",
]
