"""Minimal delimited-text decoder for the 311 CSV export.

The scanner only tracks whether it is inside double quotes. It does not
understand escaped quotes (``""``) inside a quoted field and does not join
quoted values that span physical lines; such rows come out with the wrong
field count and are dropped downstream.
"""

from __future__ import annotations

from dataclasses import dataclass

from feed311.common.errors import DecodeError

DELIMITER = ","
QUOTE = '"'
BOM = "\ufeff"


@dataclass(frozen=True)
class DecodedRow:
    line_number: int
    values: list[str]


@dataclass(frozen=True)
class DecodedFeed:
    header: list[str]
    rows: list[DecodedRow]


def parse_csv_line(line: str) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def decode_csv(text: str | None) -> DecodedFeed:
    if text is None:
        raise DecodeError("Feed is unreadable: no content")
    stripped = text.lstrip(BOM).strip()
    if not stripped:
        raise DecodeError("Feed is empty: no header row")

    lines = stripped.split("\n")
    header = parse_csv_line(lines[0])
    if not any(header):
        raise DecodeError("Feed header row is blank")

    # Data rows are numbered from 1, the line right after the header.
    rows = [DecodedRow(line_number=idx, values=parse_csv_line(line)) for idx, line in enumerate(lines[1:], start=1)]
    return DecodedFeed(header=header, rows=rows)
