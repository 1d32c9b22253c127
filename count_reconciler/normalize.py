"""Identifier normalization and lenient numeric field parsing."""

from __future__ import annotations

import math
import re

_STRIP_CHARS_RE = re.compile(r"[\ufeff\"'\s]")
_NON_DIGIT_RE = re.compile(r"[^0-9]")
_BOM_AND_QUOTES_RE = re.compile(r"[\ufeff\"']")
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX_RE = re.compile(r"^[+-]?\d+")


def normalize_product_code(value: str | None) -> str:
    """Normalize a quantity-mode identifier to its digits.

    BOM, quote characters, and whitespace are removed first, then every
    remaining non-digit. An empty return value means the identifier is
    unusable.
    """

    if not value:
        return ""
    stripped = _STRIP_CHARS_RE.sub("", value)
    return _NON_DIGIT_RE.sub("", stripped)


def normalize_serial(value: str | None) -> str:
    """Normalize a serial-mode identifier: drop BOM/quotes, trim, uppercase."""

    if not value:
        return ""
    return _BOM_AND_QUOTES_RE.sub("", value).strip().upper()


def parse_money(value: str | None) -> float:
    """Parse the leading decimal number of a field, defaulting to `0.0`.

    Trailing text is ignored (`"2.50 USD"` parses as `2.5`), matching how the
    exported price columns are read. Values that overflow to infinity count
    as unparseable.
    """

    if value is None:
        return 0.0
    match = _FLOAT_PREFIX_RE.match(value.strip())
    if match is None:
        return 0.0
    parsed = float(match.group(0))
    if not math.isfinite(parsed):
        return 0.0
    return parsed


def parse_count(value: str | None) -> int:
    """Parse the leading integer of a field as a non-negative count."""

    if value is None:
        return 0
    match = _INT_PREFIX_RE.match(value.strip())
    if match is None:
        return 0
    # Expected quantities are never negative.
    return max(int(match.group(0)), 0)
