"""Delimited-text parsing and header-driven column mapping for inventory exports."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .config import DEFAULT_CONFIG, ReconcilerConfig
from .models import ColumnMapping, QuantityRecord, SerialRecord, SessionMode
from .normalize import normalize_product_code, normalize_serial, parse_count, parse_money

logger = logging.getLogger(__name__)

HeaderMatcher = Callable[[str], bool]


def _contains(term: str) -> HeaderMatcher:
    return lambda header: term in header.lower()


def _equals(term: str) -> HeaderMatcher:
    return lambda header: header.lower() == term


@dataclass(frozen=True, slots=True)
class ColumnRule:
    """Locates one semantic field by testing each header name in order."""

    field: str
    matchers: tuple[HeaderMatcher, ...]

    def locate(self, headers: list[str]) -> int | None:
        """Return the index of the first header accepted by any matcher."""

        for index, header in enumerate(headers):
            if any(matcher(header) for matcher in self.matchers):
                return index
        return None


_QUANTITY_RULES = (
    ColumnRule("identifier", (_contains("item number"), _equals("upc"))),
    ColumnRule("name", (_contains("item name"),)),
    ColumnRule("cost", (_equals("cost"),)),
    ColumnRule("selling_price", (_contains("selling price"),)),
    ColumnRule("list_price", (_contains("list price"),)),
    ColumnRule("expected_quantity", (_equals("quantity"),)),
    ColumnRule("category", (_equals("category"),)),
)

_SERIAL_RULES = (
    ColumnRule("identifier", (_contains("serial number"),)),
    ColumnRule("reference", (_contains("bound book"),)),
    ColumnRule("manufacturer", (_contains("manufacturer"),)),
    ColumnRule("model", (_contains("model"),)),
    ColumnRule("caliber", (_contains("caliber"),)),
    ColumnRule("description", (_contains("description"),)),
)


def parse_delimited_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one line into trimmed field values.

    A double quote toggles quoted mode, inside which the delimiter is literal
    text. Quote characters are dropped and there is no escape for a literal
    quote inside a quoted field: `"a""b"` reads as `ab`. An empty line yields
    a single empty field.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def split_lines(text: str) -> list[str]:
    """Split raw text on newlines, tolerating Windows line endings."""

    return [line.rstrip("\r") for line in text.split("\n")]


def detect_mode(headers: list[str], config: ReconcilerConfig = DEFAULT_CONFIG) -> SessionMode:
    """Classify a header row as serial or quantity mode.

    Any header containing a serial marker term (case-insensitive) selects
    serial mode; everything else is quantity mode.
    """

    for header in headers:
        lowered = header.lower()
        if any(marker in lowered for marker in config.serial_markers):
            return SessionMode.SERIAL
    return SessionMode.QUANTITY


def map_columns(headers: list[str], mode: SessionMode) -> ColumnMapping:
    """Resolve the column index of every semantic field required by `mode`."""

    rules = _SERIAL_RULES if mode is SessionMode.SERIAL else _QUANTITY_RULES
    mapping = ColumnMapping(mode=mode, columns={rule.field: rule.locate(headers) for rule in rules})
    if mapping.missing:
        logger.debug("Columns not found in %s header: %s", mode.value, ", ".join(mapping.missing))
    return mapping


def _value(values: list[str], index: int | None) -> str | None:
    """Return the field at `index`, or `None` when absent or out of range."""

    if index is None or index >= len(values):
        return None
    return values[index]


def _text(values: list[str], index: int | None, default: str = "") -> str:
    return _value(values, index) or default


def to_quantity_record(
    values: list[str],
    mapping: ColumnMapping,
    config: ReconcilerConfig = DEFAULT_CONFIG,
) -> QuantityRecord | None:
    """Convert one row into a quantity record, or `None` if it has no usable code."""

    raw_identifier = _text(values, mapping.index_of("identifier"))
    identifier = normalize_product_code(raw_identifier)
    if not identifier:
        return None

    return QuantityRecord(
        identifier=identifier,
        source_identifier=raw_identifier,
        name=_text(values, mapping.index_of("name"), config.unknown_item_name),
        cost=parse_money(_value(values, mapping.index_of("cost"))),
        selling_price=parse_money(_value(values, mapping.index_of("selling_price"))),
        list_price=parse_money(_value(values, mapping.index_of("list_price"))),
        expected_quantity=parse_count(_value(values, mapping.index_of("expected_quantity"))),
        category=_text(values, mapping.index_of("category")),
    )


def to_serial_record(values: list[str], mapping: ColumnMapping) -> SerialRecord | None:
    """Convert one row into a serial record, or `None` if it has no usable serial."""

    identifier = normalize_serial(_value(values, mapping.index_of("identifier")))
    if not identifier:
        return None

    return SerialRecord(
        identifier=identifier,
        reference=_text(values, mapping.index_of("reference")),
        manufacturer=_text(values, mapping.index_of("manufacturer")),
        model=_text(values, mapping.index_of("model")),
        caliber=_text(values, mapping.index_of("caliber")),
        description=_text(values, mapping.index_of("description")),
    )


@dataclass(slots=True)
class ParsedInventory:
    """Records parsed from one inventory export, keyed by normalized identifier."""

    mode: SessionMode
    mapping: ColumnMapping
    records: dict[str, QuantityRecord] | dict[str, SerialRecord]
    skipped_rows: int = 0


def parse_inventory(text: str, config: ReconcilerConfig = DEFAULT_CONFIG) -> ParsedInventory | None:
    """Parse raw CSV text into keyed records for the detected mode.

    Returns `None` when the text has fewer than two lines. Blank lines are
    ignored; rows whose identifier normalizes to empty are skipped and counted.
    A later row with the same identifier replaces an earlier one.
    """

    lines = split_lines(text)
    if len(lines) < 2:
        return None

    headers = parse_delimited_line(lines[0].lstrip("\ufeff"), config.delimiter)
    mode = detect_mode(headers, config)
    mapping = map_columns(headers, mode)

    records: dict = {}
    skipped_rows = 0
    for line in lines[1:]:
        line = line.strip()
        if not line:
            continue

        values = parse_delimited_line(line, config.delimiter)
        if mode is SessionMode.SERIAL:
            record = to_serial_record(values, mapping)
        else:
            record = to_quantity_record(values, mapping, config)

        if record is None:
            skipped_rows += 1
            continue
        records[record.identifier] = record

    return ParsedInventory(mode=mode, mapping=mapping, records=records, skipped_rows=skipped_rows)
