"""Reconciliation session: load, scan dispatch, reset, and clear."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from .config import DEFAULT_CONFIG, ReconcilerConfig
from .models import (
    ColumnMapping,
    ExceptionRecord,
    LoadResult,
    QuantityRecord,
    ReconciliationStats,
    ScanResult,
    SerialRecord,
    SessionMode,
    SessionSnapshot,
)
from .normalize import normalize_product_code, normalize_serial
from .parser import parse_inventory, split_lines
from .stores import ActiveInventory, ExceptionStore, QuantityInventory, SerialInventory, build_inventory
from .summary import project_summary

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Owns one reconciliation session and is the only writer of its stores.

    Every public operation takes the same lock, so scans arriving from more
    than one thread are applied one at a time.
    """

    def __init__(self, config: ReconcilerConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._lock = threading.Lock()
        self._inventory: ActiveInventory | None = None
        self._exceptions = ExceptionStore()
        self._mapping: ColumnMapping | None = None
        self._last_scan: ScanResult | None = None

    @property
    def mode(self) -> SessionMode:
        """Return the active mode, quantity when nothing is loaded."""

        if self._inventory is None:
            return SessionMode.QUANTITY
        return self._inventory.mode

    @property
    def is_loaded(self) -> bool:
        """Return whether an inventory is currently loaded."""

        return self._inventory is not None

    @property
    def column_mapping(self) -> ColumnMapping | None:
        """Return the header mapping resolved by the last load."""

        return self._mapping

    @property
    def last_scan(self) -> ScanResult | None:
        """Return the most recent scan result, or `None` after load, reset, or clear."""

        return self._last_scan

    def load(self, text: str) -> LoadResult | None:
        """Replace the session's inventory with records parsed from CSV text.

        Text with fewer than two lines leaves the session untouched and
        returns `None`.
        """

        parsed = parse_inventory(text, self.config)
        if parsed is None:
            logger.warning("Inventory text has no data rows; load ignored")
            return None

        with self._lock:
            self._inventory = build_inventory(parsed.mode, parsed.records)
            self._mapping = parsed.mapping
            self._exceptions.clear()
            self._last_scan = None

        logger.info(
            "Loaded %d %s records (%d rows skipped)",
            len(parsed.records),
            parsed.mode.value,
            parsed.skipped_rows,
        )
        return LoadResult(
            mode=parsed.mode,
            mapping=parsed.mapping,
            record_count=len(parsed.records),
            skipped_rows=parsed.skipped_rows,
        )

    def normalize(self, raw: str) -> str:
        """Normalize a raw scanned token for the active mode."""

        if self.mode is SessionMode.SERIAL:
            return normalize_serial(raw)
        return normalize_product_code(raw)

    def scan(self, raw: str) -> ScanResult | None:
        """Apply one scanned token to the session.

        Returns `None` without touching any state when the token normalizes
        to an empty identifier.
        """

        with self._lock:
            identifier = self.normalize(raw)
            if not identifier:
                logger.debug("Rejected empty scan token %r", raw)
                return None

            now = self.config.clock()
            inventory = self._inventory
            if inventory is not None and identifier in inventory:
                if isinstance(inventory, SerialInventory):
                    serial, already_scanned = inventory.record_scan(identifier, now)
                    result = ScanResult(
                        outcome="matched",
                        identifier=identifier,
                        count=1,
                        name=serial.display_name,
                        already_scanned=already_scanned,
                    )
                else:
                    record = inventory.record_scan(identifier, now)
                    result = ScanResult(
                        outcome="matched",
                        identifier=identifier,
                        count=record.scanned_quantity,
                        name=record.name,
                    )
            else:
                exception = self._exceptions.record_scan(identifier, now)
                result = ScanResult(outcome="exception", identifier=identifier, count=exception.scan_count)

            self._last_scan = result

        logger.debug("Scan %s -> %s (count=%d)", identifier, result.outcome, result.count)
        return result

    def reset_scans(self) -> None:
        """Zero all scan state, keeping the loaded records and mode."""

        with self._lock:
            if self._inventory is not None:
                self._inventory.reset()
            self._exceptions.clear()
            self._last_scan = None
        logger.info("Scan state reset")

    def clear_all(self) -> None:
        """Discard all records and return to an unloaded quantity-mode session."""

        with self._lock:
            self._inventory = None
            self._mapping = None
            self._exceptions.clear()
            self._last_scan = None
        logger.info("Session cleared")

    def quantity_records(self) -> list[QuantityRecord]:
        """Return copies of the quantity records, empty outside quantity mode."""

        with self._lock:
            if self._inventory is None or self._inventory.mode is not SessionMode.QUANTITY:
                return []
            return self._inventory.snapshot()

    def serial_records(self) -> list[SerialRecord]:
        """Return copies of the serial records, empty outside serial mode."""

        with self._lock:
            if self._inventory is None or self._inventory.mode is not SessionMode.SERIAL:
                return []
            return self._inventory.snapshot()

    def exception_records(self) -> list[ExceptionRecord]:
        """Return copies of the exception records."""

        with self._lock:
            return self._exceptions.snapshot()

    def stats(self) -> ReconciliationStats:
        """Return summary statistics recomputed from the current stores."""

        with self._lock:
            return project_summary(self._inventory, self._exceptions)

    def snapshot(self) -> SessionSnapshot:
        """Return every output of the session captured atomically.

        Stats and record lists come from one lock acquisition, so they
        always describe the same set of scans.
        """

        with self._lock:
            inventory = self._inventory
            return SessionSnapshot(
                mode=SessionMode.QUANTITY if inventory is None else inventory.mode,
                loaded=inventory is not None,
                mapping=self._mapping,
                stats=project_summary(inventory, self._exceptions),
                quantity_records=inventory.snapshot() if isinstance(inventory, QuantityInventory) else [],
                serial_records=inventory.snapshot() if isinstance(inventory, SerialInventory) else [],
                exceptions=self._exceptions.snapshot(),
                last_scan=self._last_scan,
            )


@dataclass(slots=True)
class BatchTally:
    """Per-outcome counts for a batch of scan tokens."""

    considered: int = 0
    matched_new: int = 0
    matched_repeat: int = 0
    exceptions: int = 0
    rejected: int = 0

    def add(self, result: ScanResult | None) -> None:
        """Count one scan outcome; `None` is a rejected token."""

        self.considered += 1
        if result is None:
            self.rejected += 1
        elif result.outcome == "exception":
            self.exceptions += 1
        elif result.already_scanned or result.count > 1:
            self.matched_repeat += 1
        else:
            self.matched_new += 1


def scan_batch(engine: ReconciliationEngine, tokens: str | Iterable[str]) -> BatchTally:
    """Scan tokens in order through the single-scan path.

    `tokens` may be pasted text (one token per line) or an iterable of
    tokens. Blank tokens are discarded before scanning. A quantity-mode
    match counts as a repeat when its running count is above one.
    """

    if isinstance(tokens, str):
        tokens = split_lines(tokens)

    tally = BatchTally()
    for token in tokens:
        if not token.strip():
            continue
        tally.add(engine.scan(token))

    logger.info(
        "Batch of %d tokens: %d new, %d repeat, %d exceptions, %d rejected",
        tally.considered,
        tally.matched_new,
        tally.matched_repeat,
        tally.exceptions,
        tally.rejected,
    )
    return tally
