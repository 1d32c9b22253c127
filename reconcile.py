"""Command-line runner for scan-count reconciliation.

Loads an inventory CSV, applies a file of scanned tokens (one per line) as a
batch, and writes a structured JSON report under `output/` by default.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from count_reconciler import BatchTally, ReconciliationEngine, build_session_report, scan_batch, write_report

DEFAULT_OUTPUT = Path("output/reconciliation_report.json")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger("reconcile")


class EmptyInventoryError(ValueError):
    """Raised when the inventory file has no header plus data row."""


def _read_text(path: Path) -> str:
    """Read a text input, where `-` means standard input."""

    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8-sig")


def run_session(
    *,
    inventory_path: Path,
    scans_path: Path | None,
    engine: ReconciliationEngine | None = None,
) -> tuple[dict[str, Any], BatchTally]:
    """Load inventory, apply scans, and return the report with batch counts."""

    engine = engine or ReconciliationEngine()
    loaded = engine.load(_read_text(inventory_path))
    if loaded is None:
        raise EmptyInventoryError(f"Inventory has no data rows: {inventory_path}")

    tally = BatchTally()
    if scans_path is not None:
        tally = scan_batch(engine, _read_text(scans_path))

    report = build_session_report(engine)
    report["metadata"]["inventory_path"] = str(inventory_path)
    report["metadata"]["skipped_rows"] = loaded.skipped_rows
    report["batch"] = {
        "considered": tally.considered,
        "matched_new": tally.matched_new,
        "matched_repeat": tally.matched_repeat,
        "exceptions": tally.exceptions,
        "rejected": tally.rejected,
    }
    return report, tally


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for a reconciliation run."""

    parser = argparse.ArgumentParser(description="Reconcile scanned barcodes or serials against an inventory CSV.")
    parser.add_argument("--inventory", type=Path, required=True, help="Path to the expected inventory CSV")
    parser.add_argument("--scans", type=Path, default=None, help="Scanned tokens, one per line ('-' for stdin)")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Output JSON path")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for command-line execution."""

    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    try:
        report, tally = run_session(inventory_path=args.inventory, scans_path=args.scans)
    except EmptyInventoryError as exc:
        logger.error("%s", exc)
        return 1

    write_report(report, output_path=args.output)
    summary = report["summary"]
    print(
        f"Wrote reconciliation report: {args.output} "
        f"({summary['total_scanned_items']}/{summary['total_expected_items']} scanned, "
        f"{tally.exceptions} exception scans)"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
