"""
CSV ingestion: decode raw upload bytes, tokenize with pandas and build a typed
:class:`~antlyst.table.Table`.

Column types are decided here, once. A column is numeric only when every
non-empty cell is a plain decimal literal that converts to a finite float; one
stray value demotes the whole column to text. Columns with no values at all
are typed ``unknown``.
"""
from __future__ import annotations

import csv
import io
import logging
import math
import re
from typing import Any, Sequence

import pandas as pd

from antlyst.config import CSV_ENCODINGS
from antlyst.table import Column, ColumnType, Table

logger = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


class ParseError(ValueError):
    """Raised when an upload cannot be turned into a table at all."""


def decode_csv_bytes(raw: bytes | bytearray | str) -> str:
    if isinstance(raw, str):
        return raw.lstrip("\ufeff")
    content = bytes(raw)
    last_error: Exception | None = None
    for encoding in CSV_ENCODINGS:
        try:
            return content.decode(encoding).lstrip("\ufeff")
        except UnicodeDecodeError as exc:
            last_error = exc
    raise ParseError(f"Could not decode CSV with supported encodings. Last error: {last_error}")


class HeaderNormalizer:
    """Cleans header cells and disambiguates duplicates with ``_2``, ``_3`` suffixes."""

    def __init__(self) -> None:
        self._base_counts: dict[str, int] = {}
        self._used: set[str] = set()

    @staticmethod
    def _clean(raw: Any, index: int) -> str:
        text = "" if _is_missing(raw) else str(raw)
        text = text.lstrip("\ufeff").strip()
        return text or f"column_{index + 1}"

    def _allocate(self, base: str) -> str:
        count = self._base_counts.get(base, 0)
        candidate = base if count == 0 else f"{base}_{count + 1}"
        while candidate in self._used:
            count += 1
            candidate = f"{base}_{count + 1}"
        self._base_counts[base] = count + 1
        self._used.add(candidate)
        return candidate

    def normalize(self, fieldnames: Sequence[Any]) -> list[str]:
        if all(_cell_text(name) is None for name in fieldnames):
            raise ParseError("Header row is blank; column names cannot be determined.")
        return [self._allocate(self._clean(name, index)) for index, name in enumerate(fieldnames)]


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _cell_text(value: Any) -> str | None:
    if _is_missing(value):
        return None
    text = str(value)
    if not text.strip():
        return None
    return text


def parse_number(text: str) -> float | None:
    """Return the finite float for a plain numeric literal, else ``None``."""
    candidate = text.strip()
    if not NUMBER_PATTERN.match(candidate):
        return None
    try:
        value = float(candidate)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def infer_column(name: str, raw_cells: Sequence[Any]) -> Column:
    cells = [_cell_text(value) for value in raw_cells]
    present = [cell for cell in cells if cell is not None]
    if not present:
        return Column(name=name, type=ColumnType.UNKNOWN, values=tuple(None for _ in cells))

    parsed = [None if cell is None else parse_number(cell) for cell in cells]
    if all(number is not None for cell, number in zip(cells, parsed) if cell is not None):
        return Column(name=name, type=ColumnType.NUMERIC, values=tuple(parsed))
    return Column(name=name, type=ColumnType.TEXT, values=tuple(cells))


def _read_frame(text: str, max_rows: int | None) -> tuple[pd.DataFrame, int]:
    """Tokenize ``text``; returns the raw frame and the number of over-long rows skipped."""
    nrows = None if max_rows is None else max_rows + 1
    dropped: list[list[str]] = []

    def _skip_bad_line(bad_line: list[str]) -> None:
        dropped.append(bad_line)
        return None

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=object,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
            on_bad_lines=_skip_bad_line,
            engine="python",
            quoting=csv.QUOTE_MINIMAL,
            nrows=nrows,
        )
    except pd.errors.EmptyDataError as exc:
        raise ParseError("CSV input is empty; a header row is required.") from exc
    except pd.errors.ParserError as exc:
        raise ParseError(f"CSV input could not be tokenized: {exc}") from exc
    return frame, len(dropped)


def read_table(raw: bytes | bytearray | str, max_rows: int | None = None) -> Table:
    """
    Parse CSV content with a header row into a typed Table.

    Rows with more fields than the header are dropped, shorter rows are padded
    with missing cells. ``max_rows`` caps the number of data rows read.
    """
    text = decode_csv_bytes(raw)
    if not text.strip():
        raise ParseError("CSV input is empty; a header row is required.")

    frame, dropped = _read_frame(text, max_rows)
    if frame.shape[1] == 0 or frame.shape[0] == 0:
        raise ParseError("CSV input has no columns.")

    headers = HeaderNormalizer().normalize(frame.iloc[0].tolist())
    body = frame.iloc[1:]
    row_count = int(body.shape[0])
    if row_count == 0:
        raise ParseError("CSV input has a header but no data rows.")

    # na_filter is off, so only cells pandas filled in for short rows are NA.
    padded = int(body.isna().any(axis=1).sum())
    if dropped or padded:
        logger.debug("Ragged CSV rows: dropped=%d padded=%d", dropped, padded)

    columns = tuple(
        infer_column(name, body.iloc[:, index].tolist()) for index, name in enumerate(headers)
    )
    logger.debug(
        "Parsed CSV table: rows=%d columns=%d types=%s",
        row_count,
        len(columns),
        {column.name: column.type.value for column in columns},
    )
    return Table(columns=columns, row_count=row_count)
