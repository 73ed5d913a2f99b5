"""Streaming reader for FFIEC bulk Call Report schedule files.

Each schedule is a tab-delimited text file:
  line 1 - MDRM field codes (IDRSSD, RCFD2170, RIAD4340 ...), possibly quoted
  line 2 - human-readable field descriptions
  line 3+ - one row per reporting bank, column-aligned to line 1

Files are read one line at a time; the largest schedules run to tens of
thousands of rows with very long lines, so the raw text is never held in
memory as a whole.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

log = logging.getLogger(__name__)

DELIMITER = "\t"
ENTITY_KEY = "IDRSSD"

RawRecord = dict[str, Any]

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


@dataclass
class ParsedSchedule:
    """All rows of one schedule plus its header rows."""
    field_codes: list[str]
    field_descriptions: list[str]
    records: list[RawRecord] = field(default_factory=list)
    skipped_rows: int = 0

    def description_for(self, code: str) -> str | None:
        """Look up the human-readable description of a field code."""
        try:
            idx = self.field_codes.index(code)
        except ValueError:
            return None
        if idx >= len(self.field_descriptions):
            return None
        return self.field_descriptions[idx] or None


def _strip_quotes(token: str) -> str:
    return token.strip().replace('"', "")


def parse_cell(raw: str) -> int | float | str | None:
    """Convert one cell: empty → None, numeric literal → number, else str."""
    value = raw.strip()
    if value == "":
        return None
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        value = value[1:-1]
        return value if value else None
    return value


def _split(line: str) -> list[str]:
    return line.rstrip("\r\n").split(DELIMITER)


def iter_schedule(path: str | Path) -> Iterator[RawRecord]:
    """Yield one field-code → value mapping per data row.

    Rows whose cell count differs from the header are logged and skipped.
    Use ``read_schedule`` when the header rows are needed as well.
    """
    reader = _ScheduleStream(path)
    yield from reader


class _ScheduleStream:
    """Single-pass iterator over a schedule file that remembers its header."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.field_codes: list[str] = []
        self.field_descriptions: list[str] = []
        self.skipped_rows = 0

    def __iter__(self) -> Iterator[RawRecord]:
        with self.path.open("r", encoding="utf-8", errors="replace", newline="") as fh:
            for line_number, line in enumerate(fh, start=1):
                if line_number == 1:
                    self.field_codes = [_strip_quotes(c) for c in _split(line)]
                    continue
                if line_number == 2:
                    self.field_descriptions = [_strip_quotes(c) for c in _split(line)]
                    continue
                if not line.strip("\r\n"):
                    continue

                cells = _split(line)
                if len(cells) != len(self.field_codes):
                    self.skipped_rows += 1
                    log.warning(
                        "%s line %d: expected %d cells, found %d - row skipped",
                        self.path.name, line_number, len(self.field_codes), len(cells),
                    )
                    continue

                record: RawRecord = {}
                for code, raw in zip(self.field_codes, cells):
                    if code:
                        record[code] = parse_cell(raw)
                yield record


def read_schedule(path: str | Path) -> ParsedSchedule:
    """Parse a schedule file into records plus its header and description rows."""
    stream = _ScheduleStream(path)
    records = list(stream)
    if not stream.field_codes:
        raise ValueError(f"Schedule file {stream.path} is empty")
    log.debug(
        "Parsed %s: %d records, %d skipped", stream.path.name, len(records), stream.skipped_rows,
    )
    return ParsedSchedule(
        field_codes=stream.field_codes,
        field_descriptions=stream.field_descriptions,
        records=records,
        skipped_rows=stream.skipped_rows,
    )


def entity_id(record: RawRecord, key: str = ENTITY_KEY) -> str | None:
    """Normalise the bank identifier of a record to a string."""
    value = record.get(key)
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip() or None


def index_by_entity(records: list[RawRecord], key: str = ENTITY_KEY) -> dict[str, RawRecord]:
    """Build an IDRSSD → record lookup map.  Later duplicates win."""
    index: dict[str, RawRecord] = {}
    for record in records:
        rid = entity_id(record, key)
        if rid is not None:
            index[rid] = record
    return index
