"""Asset CSV parsing.

Turns the raw text of a comma-separated asset export into validated
:class:`AssetRecord` objects. Rows that are short, unparsable or outside
the admissible region are dropped without raising: the source is a
large external dataset with stray rows, and one bad line must not fail
the whole load.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from hydrantgate._constants import LATITUDE_COLUMN, LONGITUDE_COLUMN
from hydrantgate.config import AdmissibleRegion
from hydrantgate.exceptions import EmptyDataError, SchemaError
from hydrantgate.models.asset import AssetRecord

_logger = logging.getLogger(__name__)

DEFAULT_REGION = AdmissibleRegion()


@dataclass
class ParseReport:
    """Optional diagnostics filled in by :func:`parse_assets`."""

    rows_total: int = 0
    rows_short: int = 0
    rows_unparsable: int = 0
    rows_out_of_region: int = 0
    records: int = 0

    @property
    def rows_dropped(self) -> int:
        return self.rows_short + self.rows_unparsable + self.rows_out_of_region


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line into stripped fields.

    Double quotes toggle quoting, ``""`` inside quotes is a literal
    quote and commas inside quotes are not separators.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)
    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    fields.append("".join(current).strip())
    return fields


def _coordinate(value: Any) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def _find_column(header: list[str], name: str) -> int:
    for index, column in enumerate(header):
        if column.lower() == name:
            return index
    return -1


def parse_assets(
    text: str,
    *,
    region: AdmissibleRegion = DEFAULT_REGION,
    report: ParseReport | None = None,
) -> list[AssetRecord]:
    """Parse asset CSV text into records, in source order.

    Parameters
    ----------
    text : str
        Full CSV text; the first non-blank line is the header.
    region : AdmissibleRegion
        Records outside this region are dropped.
    report : ParseReport or None
        When given, receives counts of kept and dropped rows.

    Returns
    -------
    list[AssetRecord]
        The valid records.

    Raises
    ------
    EmptyDataError
        If the text has no non-blank lines.
    SchemaError
        If the header has no ``latitude`` or ``longitude`` column.
    """
    # Only "\n" (optionally preceded by "\r") ends a row.
    raw_lines = (line.removesuffix("\r") for line in text.removeprefix("\ufeff").split("\n"))
    lines = [line for line in raw_lines if line.strip()]
    if not lines:
        raise EmptyDataError("Asset source is empty")

    header = split_csv_line(lines[0])
    _logger.debug("Asset CSV header: %s", header)

    lat_idx = _find_column(header, LATITUDE_COLUMN)
    lon_idx = _find_column(header, LONGITUDE_COLUMN)
    if lat_idx == -1 or lon_idx == -1:
        raise SchemaError("Could not find LATITUDE or LONGITUDE columns in asset source")
    _logger.debug("Found latitude at index %d, longitude at index %d", lat_idx, lon_idx)

    stats = report if report is not None else ParseReport()
    required = max(lat_idx, lon_idx)
    records: list[AssetRecord] = []

    for line in lines[1:]:
        stats.rows_total += 1
        fields = split_csv_line(line)
        if len(fields) <= required:
            stats.rows_short += 1
            continue

        latitude = _coordinate(fields[lat_idx])
        longitude = _coordinate(fields[lon_idx])
        if latitude is None or longitude is None:
            stats.rows_unparsable += 1
            continue

        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0) or not region.contains(
            latitude, longitude
        ):
            stats.rows_out_of_region += 1
            continue

        records.append(AssetRecord(latitude=latitude, longitude=longitude))

    stats.records = len(records)
    _logger.debug(
        "Parsed %d records from %d rows (short=%d unparsable=%d out_of_region=%d)",
        stats.records,
        stats.rows_total,
        stats.rows_short,
        stats.rows_unparsable,
        stats.rows_out_of_region,
    )
    return records
