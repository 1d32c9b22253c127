"""Batch scanning tests using the sample files under `data/`."""

from __future__ import annotations

import threading
from pathlib import Path

from count_reconciler import ReconciliationEngine, scan_batch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
QUANTITY_CSV = PROJECT_ROOT / "data" / "inventory_quantity.csv"
SERIAL_CSV = PROJECT_ROOT / "data" / "inventory_serial.csv"
SCANS = PROJECT_ROOT / "data" / "scans.txt"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def test_sample_quantity_inventory_loads_expected_rows(engine: ReconciliationEngine) -> None:
    """Quoted names, blank lines, and codeless rows should be handled on load."""
    loaded = engine.load(_read(QUANTITY_CSV))

    assert loaded is not None
    assert loaded.record_count == 4
    assert loaded.skipped_rows == 1

    by_id = {record.identifier: record for record in engine.quantity_records()}
    assert set(by_id) == {"012345", "0700012345", "400100", "400200"}
    assert by_id["0700012345"].name == "Hex Key Set, Metric"
    assert by_id["0700012345"].source_identifier == "0-7000-1234-5"
    assert by_id["400200"].name == "Unknown Item"
    assert by_id["400200"].category == ""


def test_batch_tally_counts_each_outcome(engine: ReconciliationEngine) -> None:
    """The sample scan file should split into new, repeat, exception, and rejected tokens."""
    engine.load(_read(QUANTITY_CSV))

    tally = scan_batch(engine, _read(SCANS))

    assert tally.considered == 7
    assert tally.matched_new == 3
    assert tally.matched_repeat == 2
    assert tally.exceptions == 1
    assert tally.rejected == 1


def test_batch_leaves_last_scan_from_final_processed_token(engine: ReconciliationEngine) -> None:
    """A rejected final token does not overwrite the previous result."""
    engine.load(_read(QUANTITY_CSV))

    scan_batch(engine, _read(SCANS))

    assert engine.last_scan is not None
    assert engine.last_scan.identifier == "400100"
    assert engine.last_scan.count == 2


def test_batch_matches_repeated_single_scans() -> None:
    """A batch must leave the same state as scanning each token in turn."""
    tokens = ["012345", "", "999999", "012345"]
    batch_engine = ReconciliationEngine()
    single_engine = ReconciliationEngine()
    for target in (batch_engine, single_engine):
        target.load(_read(QUANTITY_CSV))

    scan_batch(batch_engine, tokens)
    for token in tokens:
        if token.strip():
            single_engine.scan(token)

    assert batch_engine.stats() == single_engine.stats()
    assert batch_engine.last_scan == single_engine.last_scan


def test_serial_batch_counts_repeats(engine: ReconciliationEngine) -> None:
    """Serial batches count a second scan of the same serial as a repeat."""
    loaded = engine.load(_read(SERIAL_CSV))
    assert loaded is not None
    assert loaded.record_count == 3
    assert loaded.skipped_rows == 1

    tally = scan_batch(engine, "sn1\nSN1\nsn2\nnot-there\n\n")

    assert (tally.matched_new, tally.matched_repeat, tally.exceptions) == (2, 1, 1)
    assert engine.stats().not_scanned_items == 1


def test_concurrent_scans_are_all_counted(engine: ReconciliationEngine) -> None:
    """Scans from several threads must not lose increments."""
    engine.load(_read(QUANTITY_CSV))

    def worker() -> None:
        for _ in range(200):
            engine.scan("012345")
            engine.scan("777")

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    by_id = {record.identifier: record for record in engine.quantity_records()}
    assert by_id["012345"].scanned_quantity == 800
    assert engine.exception_records()[0].scan_count == 800
