"""Summary statistics projected from the inventory and exception stores."""

from __future__ import annotations

from .models import ReconciliationStats
from .stores import ActiveInventory, ExceptionStore, QuantityInventory, SerialInventory


def _quantity_stats(inventory: QuantityInventory, exceptions: ExceptionStore) -> ReconciliationStats:
    records = list(inventory.records.values())
    scanned = [record for record in records if record.scanned_quantity > 0]
    matched = sum(1 for record in scanned if record.scanned_quantity == record.expected_quantity)

    return ReconciliationStats(
        total_expected_items=len(records),
        total_scanned_items=len(scanned),
        matched_items=matched,
        discrepancy_items=len(scanned) - matched,
        not_scanned_items=len(records) - len(scanned),
        exception_items=len(exceptions),
        total_expected_quantity=sum(record.expected_quantity for record in records),
        total_scanned_quantity=sum(record.scanned_quantity for record in records) + exceptions.total_scans,
    )


def _serial_stats(inventory: SerialInventory, exceptions: ExceptionStore) -> ReconciliationStats:
    total = len(inventory)
    scanned = sum(1 for record in inventory.records.values() if record.scanned)

    # Each serial is one unit, so there is no partial-count discrepancy.
    return ReconciliationStats(
        total_expected_items=total,
        total_scanned_items=scanned,
        matched_items=scanned,
        discrepancy_items=0,
        not_scanned_items=total - scanned,
        exception_items=len(exceptions),
        total_expected_quantity=total,
        total_scanned_quantity=scanned + exceptions.total_scans,
    )


def project_summary(inventory: ActiveInventory | None, exceptions: ExceptionStore) -> ReconciliationStats:
    """Return statistics for the current store contents.

    An unloaded session (`inventory is None`) still counts exceptions, which
    keeps the projection total even though scans are normally made after a
    load.
    """

    if isinstance(inventory, SerialInventory):
        return _serial_stats(inventory, exceptions)
    if isinstance(inventory, QuantityInventory):
        return _quantity_stats(inventory, exceptions)
    return _quantity_stats(QuantityInventory(), exceptions)
