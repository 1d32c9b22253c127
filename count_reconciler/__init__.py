"""Public API exports for scan-count reconciliation."""

from .config import DEFAULT_CONFIG, ReconcilerConfig
from .engine import BatchTally, ReconciliationEngine, scan_batch
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
from .parser import detect_mode, map_columns, parse_delimited_line, parse_inventory
from .report import build_session_report, find_discrepancies, find_unscanned_serials, write_report
from .summary import project_summary

__all__ = [
    "BatchTally",
    "ColumnMapping",
    "DEFAULT_CONFIG",
    "ExceptionRecord",
    "LoadResult",
    "QuantityRecord",
    "ReconcilerConfig",
    "ReconciliationEngine",
    "ReconciliationStats",
    "ScanResult",
    "SerialRecord",
    "SessionMode",
    "SessionSnapshot",
    "build_session_report",
    "detect_mode",
    "find_discrepancies",
    "find_unscanned_serials",
    "map_columns",
    "normalize_product_code",
    "normalize_serial",
    "parse_delimited_line",
    "parse_inventory",
    "project_summary",
    "scan_batch",
    "write_report",
]
