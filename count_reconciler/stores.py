"""Keyed in-memory stores for expected inventory and unmatched scans.

The engine holds exactly one active inventory, either a `QuantityInventory`
or a `SerialInventory`, so only one mode's records can exist at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TypeAlias

from .models import ExceptionRecord, QuantityRecord, SerialRecord, SessionMode


@dataclass(slots=True)
class QuantityInventory:
    """Quantity-mode records keyed by normalized product code."""

    records: dict[str, QuantityRecord] = field(default_factory=dict)
    mode: SessionMode = field(default=SessionMode.QUANTITY, init=False)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self.records

    def __len__(self) -> int:
        return len(self.records)

    def get(self, identifier: str) -> QuantityRecord | None:
        """Return the record for `identifier`, or `None`."""

        return self.records.get(identifier)

    def record_scan(self, identifier: str, scanned_at: datetime) -> QuantityRecord:
        """Increment the scanned quantity of a known record and stamp it."""

        record = self.records[identifier]
        record.scanned_quantity += 1
        record.last_scanned = scanned_at
        return record

    def reset(self) -> None:
        """Zero scan state on every record while keeping membership."""

        for record in self.records.values():
            record.scanned_quantity = 0
            record.last_scanned = None

    def snapshot(self) -> list[QuantityRecord]:
        """Return copies of all records in load order."""

        return [replace(record) for record in self.records.values()]


@dataclass(slots=True)
class SerialInventory:
    """Serial-mode records keyed by normalized serial number."""

    records: dict[str, SerialRecord] = field(default_factory=dict)
    mode: SessionMode = field(default=SessionMode.SERIAL, init=False)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self.records

    def __len__(self) -> int:
        return len(self.records)

    def get(self, identifier: str) -> SerialRecord | None:
        """Return the record for `identifier`, or `None`."""

        return self.records.get(identifier)

    def record_scan(self, identifier: str, scanned_at: datetime) -> tuple[SerialRecord, bool]:
        """Mark a known serial as scanned.

        Returns the record and whether it had already been scanned. The write
        happens on every call, so `scanned_at` always reflects the latest scan.
        """

        record = self.records[identifier]
        already_scanned = record.scanned
        record.scanned = True
        record.scanned_at = scanned_at
        return record, already_scanned

    def reset(self) -> None:
        """Clear the scanned flag and timestamp on every record."""

        for record in self.records.values():
            record.scanned = False
            record.scanned_at = None

    def snapshot(self) -> list[SerialRecord]:
        """Return copies of all records in load order."""

        return [replace(record) for record in self.records.values()]


ActiveInventory: TypeAlias = QuantityInventory | SerialInventory


def build_inventory(mode: SessionMode, records: dict) -> ActiveInventory:
    """Wrap parsed records in the store type for `mode`."""

    if mode is SessionMode.SERIAL:
        return SerialInventory(records=records)
    return QuantityInventory(records=records)


@dataclass(slots=True)
class ExceptionStore:
    """Identifiers scanned but missing from the active inventory."""

    records: dict[str, ExceptionRecord] = field(default_factory=dict)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self.records

    def __len__(self) -> int:
        return len(self.records)

    def record_scan(self, identifier: str, scanned_at: datetime) -> ExceptionRecord:
        """Create or update the exception for `identifier`.

        A new exception starts at count 1 with both timestamps set to
        `scanned_at`; an existing one has its count incremented and only its
        last-scanned time advanced.
        """

        existing = self.records.get(identifier)
        if existing is None:
            existing = ExceptionRecord(
                identifier=identifier,
                scan_count=1,
                first_scanned=scanned_at,
                last_scanned=scanned_at,
            )
            self.records[identifier] = existing
            return existing

        existing.scan_count += 1
        existing.last_scanned = scanned_at
        return existing

    @property
    def total_scans(self) -> int:
        """Return the sum of scan counts across all exceptions."""

        return sum(record.scan_count for record in self.records.values())

    def clear(self) -> None:
        """Drop every exception record."""

        self.records.clear()

    def snapshot(self) -> list[ExceptionRecord]:
        """Return copies of all exceptions in first-scanned order."""

        return [replace(record) for record in self.records.values()]
