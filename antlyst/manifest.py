"""
Dataset manifest: the structural summary stored next to an uploaded file
(row count, column types, per-column statistics, a Pearson correlation
matrix over the numeric columns and a preview of the leading rows).
"""
from __future__ import annotations

import math
from typing import Any, Optional

import numpy as np

from antlyst.config import MANIFEST_PREVIEW_ROWS
from antlyst.dashboards import _utc_now_iso
from antlyst.stats import summarize_table
from antlyst.table import Column, Table, json_value


def pearson(left: Column, right: Column) -> Optional[float]:
    pairs = [(x, y) for x, y in zip(left.values, right.values) if x is not None and y is not None]
    if len(pairs) < 2:
        return None
    xs = np.array([x for x, _ in pairs], dtype=float)
    ys = np.array([y for _, y in pairs], dtype=float)
    if xs.std() == 0 or ys.std() == 0:
        return None
    value = float(np.corrcoef(xs, ys)[0, 1])
    return round(value, 6) if math.isfinite(value) else None


def correlation_matrix(table: Table) -> Optional[dict[str, dict[str, Optional[float]]]]:
    numeric_columns = table.numeric_columns
    if len(numeric_columns) < 2:
        return None

    matrix: dict[str, dict[str, Optional[float]]] = {column.name: {} for column in numeric_columns}
    for left_index, left in enumerate(numeric_columns):
        for right in numeric_columns[left_index:]:
            value = pearson(left, right)
            if left is right and value is not None:
                value = 1.0
            matrix[left.name][right.name] = value
            matrix[right.name][left.name] = value
    return matrix


def preview_records(table: Table, limit: int = MANIFEST_PREVIEW_ROWS) -> list[dict[str, Any]]:
    """First ``limit`` rows as ``{column: value}`` records, missing cells as ``None``."""
    return [
        {column.name: json_value(column.values[index]) for column in table.columns}
        for index in range(min(limit, table.row_count))
    ]


def build_manifest(table: Table, preview_rows: int = MANIFEST_PREVIEW_ROWS) -> dict[str, Any]:
    summary = summarize_table(table)
    return {
        "rowCount": summary.row_count,
        "columnCount": summary.column_count,
        "columns": [{"name": column.name, "type": column.type.value} for column in table.columns],
        "summaries": [column.to_dict() for column in summary.columns],
        "correlations": correlation_matrix(table),
        "preview": preview_records(table, preview_rows),
        "generatedAt": _utc_now_iso(),
    }
