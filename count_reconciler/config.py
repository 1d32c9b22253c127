"""Engine configuration: delimiter, header marker terms, placeholders, and clock."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ReconcilerConfig:
    """Tunable settings for parsing, column detection, and timestamps."""

    delimiter: str = ","
    unknown_item_name: str = "Unknown Item"
    serial_markers: tuple[str, ...] = ("serial number", "bound book")
    clock: Callable[[], datetime] = field(default=utc_now, compare=False)

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1 or self.delimiter == '"':
            raise ValueError(f"Delimiter must be one non-quote character: {self.delimiter!r}")


DEFAULT_CONFIG = ReconcilerConfig()
