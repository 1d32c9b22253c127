"""JSON-friendly report payloads built from an engine's snapshots."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, TypedDict

from .config import utc_now
from .engine import ReconciliationEngine
from .models import ExceptionRecord, QuantityRecord, SerialRecord, SessionMode


class DiscrepancyItem(TypedDict):
    """Quantity record whose scanned count differs from the expected count."""

    identifier: str
    name: str
    expected_quantity: int
    scanned_quantity: int
    difference: int


def _iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _record_to_dict(record: QuantityRecord | SerialRecord | ExceptionRecord) -> dict[str, Any]:
    """Serialize a record dataclass, rendering datetimes as ISO-8601 strings."""

    return {key: _iso(value) if isinstance(value, datetime) else value for key, value in asdict(record).items()}


def find_discrepancies(records: list[QuantityRecord]) -> list[DiscrepancyItem]:
    """Return scanned records whose count does not match the expected quantity.

    Records that were never scanned are not discrepancies; they are simply
    uncounted.
    """

    return [
        {
            "identifier": record.identifier,
            "name": record.name,
            "expected_quantity": record.expected_quantity,
            "scanned_quantity": record.scanned_quantity,
            "difference": record.difference,
        }
        for record in records
        if record.scanned_quantity > 0 and record.scanned_quantity != record.expected_quantity
    ]


def find_unscanned_serials(records: list[SerialRecord]) -> list[str]:
    """Return identifiers of serial records not yet scanned."""

    return [record.identifier for record in records if not record.scanned]


def build_session_report(
    engine: ReconciliationEngine,
    *,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Build a complete reconciliation report payload for the current session."""

    snapshot = engine.snapshot()
    mapping = snapshot.mapping

    report: dict[str, Any] = {
        "metadata": {
            "generated_at_utc": (generated_at or utc_now()).isoformat(),
            "mode": snapshot.mode.value,
            "loaded": snapshot.loaded,
            "column_mapping": None if mapping is None else dict(mapping.columns),
        },
        "summary": asdict(snapshot.stats),
        "exceptions": [_record_to_dict(record) for record in snapshot.exceptions],
    }

    if snapshot.mode is SessionMode.SERIAL:
        serials = snapshot.serial_records
        report["not_scanned"] = find_unscanned_serials(serials)
        report["records"] = [_record_to_dict(record) for record in serials]
    else:
        quantities = snapshot.quantity_records
        report["discrepancies"] = find_discrepancies(quantities)
        report["records"] = [_record_to_dict(record) for record in quantities]

    return report


def write_report(report: dict[str, Any], *, output_path: Path) -> None:
    """Write report JSON to disk."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, indent=2, sort_keys=True, allow_nan=False) + "\n", encoding="utf-8")
