"""Tests for the summary projector and the stores it reads.

Stores are built directly here so the projection rules can be checked
without going through CSV loading.
"""

from __future__ import annotations

from datetime import datetime, timezone

from count_reconciler.models import QuantityRecord, ReconciliationStats, SerialRecord
from count_reconciler.stores import ExceptionStore, QuantityInventory, SerialInventory
from count_reconciler.summary import project_summary

NOW = datetime(2024, 1, 15, tzinfo=timezone.utc)


def _quantity(identifier: str, expected: int, scanned: int) -> QuantityRecord:
    return QuantityRecord(
        identifier=identifier,
        name=f"Item {identifier}",
        expected_quantity=expected,
        scanned_quantity=scanned,
    )


def test_quantity_summary_splits_matched_and_discrepancy() -> None:
    """Quantity stats separate exact matches from over- and under-counts."""
    inventory = QuantityInventory(
        records={
            "1": _quantity("1", expected=2, scanned=2),
            "2": _quantity("2", expected=5, scanned=3),
            "3": _quantity("3", expected=1, scanned=0),
            "4": _quantity("4", expected=0, scanned=1),
        }
    )
    exceptions = ExceptionStore()
    exceptions.record_scan("900", NOW)
    exceptions.record_scan("900", NOW)
    exceptions.record_scan("901", NOW)

    stats = project_summary(inventory, exceptions)

    assert stats == ReconciliationStats(
        total_expected_items=4,
        total_scanned_items=3,
        matched_items=1,
        discrepancy_items=2,
        not_scanned_items=1,
        exception_items=2,
        total_expected_quantity=8,
        total_scanned_quantity=9,
    )


def test_serial_summary_counts_units() -> None:
    """Serial stats treat each serial as one unit and never report discrepancies."""
    inventory = SerialInventory(
        records={
            "A": SerialRecord(identifier="A", scanned=True, scanned_at=NOW),
            "B": SerialRecord(identifier="B"),
            "C": SerialRecord(identifier="C"),
        }
    )
    exceptions = ExceptionStore()
    exceptions.record_scan("Z", NOW)
    exceptions.record_scan("Z", NOW)

    stats = project_summary(inventory, exceptions)

    assert stats.total_expected_items == 3
    assert stats.total_scanned_items == 1
    assert stats.matched_items == 1
    assert stats.discrepancy_items == 0
    assert stats.not_scanned_items == 2
    assert stats.exception_items == 1
    assert stats.total_expected_quantity == 3
    assert stats.total_scanned_quantity == 3


def test_summary_is_recomputed_from_current_contents() -> None:
    """Changing the store after a projection must show in the next one."""
    inventory = QuantityInventory(records={"1": _quantity("1", expected=1, scanned=0)})
    exceptions = ExceptionStore()

    before = project_summary(inventory, exceptions)
    inventory.record_scan("1", NOW)
    after = project_summary(inventory, exceptions)

    assert before.matched_items == 0
    assert after.matched_items == 1


def test_exception_store_keeps_first_timestamp() -> None:
    """Repeat exception scans advance only the last-scanned time."""
    later = NOW.replace(hour=5)
    exceptions = ExceptionStore()

    exceptions.record_scan("42", NOW)
    record = exceptions.record_scan("42", later)

    assert record.scan_count == 2
    assert record.first_scanned == NOW
    assert record.last_scanned == later
    assert exceptions.total_scans == 2


def test_serial_inventory_reports_prior_scan_state() -> None:
    """The serial store reports whether a record was already scanned."""
    inventory = SerialInventory(records={"A": SerialRecord(identifier="A")})

    _, first = inventory.record_scan("A", NOW)
    _, second = inventory.record_scan("A", NOW)

    assert (first, second) == (False, True)
    assert inventory.get("A").scanned is True
