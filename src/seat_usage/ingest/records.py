"""Records produced from the seat-usage export and the table schemas they load into."""

from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import TypeAlias

from seat_usage.enums import ColumnType
from seat_usage.versioning.models import ColumnDefinition

MetricKey: TypeAlias = tuple[str, str | None, str | None]


@dataclass(frozen=True, slots=True)
class UserRecord:
    """A seat holder."""

    id: str
    name: str

    def as_row(self) -> tuple[str, str]:
        return (self.id, self.name)


@dataclass(frozen=True, slots=True)
class MetricRecord:
    """Usage counters for one seat over one reporting period."""

    seat_id: str
    profiles_viewed: int
    profiles_saved_to_project: int
    inmails_sent: int
    inmails_accepted: int
    inmails_declined: int
    start_date: str | None
    end_date: str | None

    @property
    def key(self) -> MetricKey:
        """Identity of the reporting period: (seat_id, start_date, end_date)."""
        return (self.seat_id, self.start_date, self.end_date)

    def as_row(self) -> tuple[object, ...]:
        return astuple(self)


USER_COLUMNS: tuple[ColumnDefinition, ...] = (
    ColumnDefinition("id", ColumnType.STRING_PRIMARY_KEY),
    ColumnDefinition("name", ColumnType.STRING),
)

METRIC_COLUMNS: tuple[ColumnDefinition, ...] = (
    ColumnDefinition("seat_id", ColumnType.STRING),
    ColumnDefinition("profiles_viewed", ColumnType.INTEGER),
    ColumnDefinition("profiles_saved_to_project", ColumnType.INTEGER),
    ColumnDefinition("inmails_sent", ColumnType.INTEGER),
    ColumnDefinition("inmails_accepted", ColumnType.INTEGER),
    ColumnDefinition("inmails_declined", ColumnType.INTEGER),
    ColumnDefinition("start_date", ColumnType.TIMESTAMP),
    ColumnDefinition("end_date", ColumnType.TIMESTAMP),
)

USER_KEY_COLUMNS: tuple[str, ...] = ("id",)
METRIC_KEY_COLUMNS: tuple[str, ...] = ("seat_id", "start_date", "end_date")
