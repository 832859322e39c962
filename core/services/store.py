"""
Store boundary for the analytics engine.

Key patterns:
- Protocol-based dependency injection: any persistence (server database,
  client-local storage) plugs in by implementing ``HealthStore``
- Generic Result type for failures that are expected business outcomes
- Owner-scoped, read-only queries that return empty results on absence
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar, cast

import structlog

from core.domain.models import (
    MedicalHistorySnapshot,
    PurchaseRecord,
    ReminderRecord,
    SymptomEntry,
)

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


@dataclass(frozen=True, slots=True)
class Result(Generic[ValueT, ErrorT]):
    """
    Outcome of a service call: the aggregate, or the classified reason it is missing.

    Exactly one of ``value`` and ``error`` is set. Store failures are an
    expected outcome for the dashboard endpoints, so they travel here instead
    of propagating as exceptions.
    """

    value: ValueT | None = None
    error: ErrorT | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("Result needs exactly one of value or error")

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None

    def unwrap(self) -> ValueT:
        """The value; re-raises the carried error on a failed result."""
        if self.error is not None:
            raise self.error
        return cast(ValueT, self.value)

    def unwrap_or(self, default: ValueT) -> ValueT:
        return default if self.error is not None else cast(ValueT, self.value)

    def unwrap_err(self) -> ErrorT:
        if self.error is None:
            raise ValueError("unwrap_err() on a successful result")
        return self.error


class HealthStore(Protocol):
    """
    Read-only, owner-scoped access to stored health records.

    Unknown owners yield empty lists and no medical history, never an error.
    Implementations raise on infrastructure failure (connection lost, query
    error); the dashboard service classifies those.
    """

    async def fetch_symptom_entries(self, owner_id: str) -> list[SymptomEntry]: ...

    async def fetch_purchases(self, owner_id: str) -> list[PurchaseRecord]: ...

    async def fetch_reminders(self, owner_id: str) -> list[ReminderRecord]: ...

    async def fetch_medical_history(self, owner_id: str) -> MedicalHistorySnapshot | None: ...


class InMemoryHealthStore:
    """
    Dictionary-backed store.

    Backs the client-local data path and tests. Records are partitioned by
    their own ``owner_id`` on insert, so queries can never cross owners.
    """

    def __init__(self) -> None:
        self._symptoms: dict[str, list[SymptomEntry]] = defaultdict(list)
        self._purchases: dict[str, list[PurchaseRecord]] = defaultdict(list)
        self._reminders: dict[str, list[ReminderRecord]] = defaultdict(list)
        self._history: dict[str, MedicalHistorySnapshot] = {}
        self.logger = logger.bind(component="in_memory_store")

    def add_symptom_entry(self, entry: SymptomEntry) -> None:
        self._symptoms[entry.owner_id].append(entry)

    def add_purchase(self, purchase: PurchaseRecord) -> None:
        self._purchases[purchase.owner_id].append(purchase)

    def add_reminder(self, reminder: ReminderRecord) -> None:
        self._reminders[reminder.owner_id].append(reminder)

    def set_medical_history(self, history: MedicalHistorySnapshot) -> None:
        """Replace the owner's medical history; there is at most one per owner."""
        if history.owner_id in self._history:
            self.logger.debug("medical_history_replaced", owner_id=history.owner_id)
        self._history[history.owner_id] = history

    async def fetch_symptom_entries(self, owner_id: str) -> list[SymptomEntry]:
        return list(self._symptoms.get(owner_id, []))

    async def fetch_purchases(self, owner_id: str) -> list[PurchaseRecord]:
        return list(self._purchases.get(owner_id, []))

    async def fetch_reminders(self, owner_id: str) -> list[ReminderRecord]:
        return list(self._reminders.get(owner_id, []))

    async def fetch_medical_history(self, owner_id: str) -> MedicalHistorySnapshot | None:
        return self._history.get(owner_id)
