"""Core typed models shared by the parser, stores, and reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal, TypeAlias

ScanOutcome: TypeAlias = Literal["matched", "exception"]


class SessionMode(str, Enum):
    """Reconciliation mode fixed for the lifetime of one loaded data set."""

    QUANTITY = "quantity"
    SERIAL = "serial"


@dataclass(slots=True)
class QuantityRecord:
    """Expected inventory line counted by quantity and keyed by product code."""

    identifier: str
    name: str
    cost: float = 0.0
    selling_price: float = 0.0
    list_price: float = 0.0
    category: str = ""
    expected_quantity: int = 0
    scanned_quantity: int = 0
    last_scanned: datetime | None = None
    source_identifier: str = ""

    @property
    def difference(self) -> int:
        """Return scanned minus expected quantity."""

        return self.scanned_quantity - self.expected_quantity


@dataclass(slots=True)
class SerialRecord:
    """Uniquely serialized inventory item."""

    identifier: str
    reference: str = ""
    manufacturer: str = ""
    model: str = ""
    caliber: str = ""
    description: str = ""
    scanned: bool = False
    scanned_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Return the manufacturer and model joined by a space."""

        return f"{self.manufacturer} {self.model}"


@dataclass(slots=True)
class ExceptionRecord:
    """Scanned identifier that does not exist in the active inventory."""

    identifier: str
    scan_count: int
    first_scanned: datetime
    last_scanned: datetime


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of one accepted scan.

    `already_scanned` is only populated for serial-mode matches; it is `None`
    for quantity-mode matches and for every exception.
    """

    outcome: ScanOutcome
    identifier: str
    count: int
    name: str | None = None
    already_scanned: bool | None = None

    @property
    def is_match(self) -> bool:
        """Return whether the scan matched an expected record."""

        return self.outcome == "matched"


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Resolved header indexes for one load; `None` marks an absent column."""

    mode: SessionMode
    columns: dict[str, int | None]

    def index_of(self, field: str) -> int | None:
        """Return the column index for a semantic field, or `None`."""

        return self.columns.get(field)

    @property
    def missing(self) -> list[str]:
        """Return semantic fields that could not be located in the header."""

        return [field for field, index in self.columns.items() if index is None]


@dataclass(frozen=True, slots=True)
class ReconciliationStats:
    """Summary statistics derived from the inventory and exception stores."""

    total_expected_items: int = 0
    total_scanned_items: int = 0
    matched_items: int = 0
    discrepancy_items: int = 0
    not_scanned_items: int = 0
    exception_items: int = 0
    total_expected_quantity: int = 0
    total_scanned_quantity: int = 0


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of a successful inventory load."""

    mode: SessionMode
    mapping: ColumnMapping
    record_count: int
    skipped_rows: int


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Consistent copy of every engine output taken under one lock."""

    mode: SessionMode
    loaded: bool
    mapping: ColumnMapping | None
    stats: ReconciliationStats
    quantity_records: list[QuantityRecord]
    serial_records: list[SerialRecord]
    exceptions: list[ExceptionRecord]
    last_scan: ScanResult | None
