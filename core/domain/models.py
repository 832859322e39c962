"""
Domain models for health dashboard analytics.

These models represent the core business concepts and are framework-agnostic.
Stored records (symptom entries, purchases, reminders, medical history) are
inputs; everything else is derived per call and never persisted.
"""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Internal three-level severity scale."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class SeverityLabel(str, Enum):
    """Average severity label shown on the dashboard."""

    NOT_AVAILABLE = "N/A"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskLevel(str, Enum):
    """Coarse health-risk label."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ReminderKind(str, Enum):
    MEDICINE = "medicine"
    APPOINTMENT = "appointment"
    CHECKUP = "checkup"


def _as_aware(value: datetime) -> datetime:
    # Naive timestamps are stored as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class SymptomEntry(BaseModel):
    """A single symptom report. Severity is kept raw and normalized on read."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    symptoms: list[str] = Field(default_factory=list)
    severity: str | None = Field(
        default="mild", description="mild/moderate/severe or low/medium/high"
    )
    notes: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("severity", mode="before")
    @classmethod
    def drop_mistyped_severity(cls, v: object) -> str | None:
        # Non-string severities are unrecognized and normalize to mild on read
        return v if isinstance(v, str) else None

    @field_validator("notes", mode="before")
    @classmethod
    def notes_default(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("symptoms")
    @classmethod
    def drop_blank_labels(cls, v: list[str]) -> list[str]:
        return [label for label in v if label and label.strip()]

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_aware(v)


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    unit_price: float = Field(default=0.0, ge=0.0)
    quantity: int = Field(default=1, ge=1)


class PurchaseRecord(BaseModel):
    """A medicine order with its ordered line items."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    items: list[LineItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_aware(v)


class ReminderRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner_id: str
    kind: ReminderKind = ReminderKind.MEDICINE
    title: str = ""
    scheduled_for: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_aware(v)


class MedicalHistorySnapshot(BaseModel):
    """Free-text medical history. At most one per owner."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    blood_group: str = ""
    allergies: str = ""
    chronic_conditions: str = ""
    surgeries: str = ""
    medications: str = ""
    updated_at: datetime | None = None

    @field_validator(
        "blood_group", "allergies", "chronic_conditions", "surgeries", "medications", mode="before"
    )
    @classmethod
    def blank_when_missing(cls, v: object) -> object:
        return "" if v is None else v


# Derived models. Field names serialize as camelCase for the dashboard contract.
class _DerivedModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class DailyBucket(_DerivedModel):
    date: str
    symptoms: int = Field(ge=0)
    severity: int = Field(ge=0)


class SeverityBucket(_DerivedModel):
    date: str
    mild: int = Field(default=0, ge=0)
    moderate: int = Field(default=0, ge=0)
    severe: int = Field(default=0, ge=0)


class FrequencyEntry(_DerivedModel):
    name: str
    value: int = Field(gt=0)


class PurchaseSummary(_DerivedModel):
    name: str
    quantity: int = Field(ge=0)
    date: str
    price: float = Field(ge=0.0)


class TrendSymptom(_DerivedModel):
    name: str
    severity: Severity
    notes: str = ""


class TrendDay(_DerivedModel):
    date: str
    count: int = Field(gt=0)
    avg_severity: SeverityLabel
    symptoms: list[TrendSymptom]


class DashboardSnapshot(_DerivedModel):
    """Complete result of one dashboard aggregation."""

    total_symptom_count: int = Field(ge=0)
    average_severity_label: SeverityLabel
    purchase_count: int = Field(ge=0)
    appointment_count: int = Field(ge=0)
    daily_trend: list[DailyBucket]
    severity_trend: list[SeverityBucket]
    top_symptoms: list[FrequencyEntry] = Field(max_length=5)
    recent_purchases: list[PurchaseSummary] = Field(max_length=10)
    health_risk: RiskLevel


class SymptomTrendReport(_DerivedModel):
    """Sparse historical trend over a caller-chosen number of days."""

    period: str
    anchor_date: date
    total_symptoms: int = Field(ge=0)
    trends: list[TrendDay]


class HealthSummary(_DerivedModel):
    blood_group: str
    allergies: str
    chronic_conditions: str
    recent_symptom_count: int = Field(ge=0)
    health_risk_level: RiskLevel
    last_updated: datetime | None = None
