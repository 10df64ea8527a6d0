from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from antlyst.table import Column, ColumnType, Table

logger = logging.getLogger(__name__)


@dataclass
class RunningStats:
    """Single-pass (Welford) accumulator using the population variance."""

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    def update(self, value: float) -> None:
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        delta2 = value - self.mean
        self.m2 += delta * delta2
        self.min_value = value if self.min_value is None else min(self.min_value, value)
        self.max_value = value if self.max_value is None else max(self.max_value, value)

    def extend(self, values: Iterable[float]) -> "RunningStats":
        for value in values:
            self.update(value)
        return self

    @property
    def variance(self) -> float:
        if self.count < 2:
            return 0.0
        return self.m2 / self.count

    @property
    def stddev(self) -> float:
        return math.sqrt(self.variance)


@dataclass(frozen=True)
class ColumnSummary:
    name: str
    type: ColumnType
    count: int
    missing: int = 0
    mean: Optional[float] = None
    std: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def has_stats(self) -> bool:
        return self.mean is not None and self.std is not None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "count": self.count,
            "missing": self.missing,
        }
        for key in ("mean", "std", "min", "max"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True)
class TableSummary:
    row_count: int
    column_count: int
    columns: list[ColumnSummary] = field(default_factory=list)

    def column(self, name: str) -> ColumnSummary:
        for summary in self.columns:
            if summary.name == name:
                return summary
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_count": self.row_count,
            "column_count": self.column_count,
            "columns": [summary.to_dict() for summary in self.columns],
        }


def _finite_or_none(name: str, label: str, value: Optional[float]) -> Optional[float]:
    if value is None or math.isfinite(value):
        return value
    logger.warning("Dropping non-finite %s for column '%s'", label, name)
    return None


def summarize_column(column: Column) -> ColumnSummary:
    present = column.present_values
    missing = len(column.values) - len(present)
    if column.type is not ColumnType.NUMERIC or not present:
        return ColumnSummary(name=column.name, type=column.type, count=len(present), missing=missing)

    running = RunningStats().extend(present)
    mean = _finite_or_none(column.name, "mean", running.mean)
    std = _finite_or_none(column.name, "std", running.stddev) if mean is not None else None
    return ColumnSummary(
        name=column.name,
        type=column.type,
        count=running.count,
        missing=missing,
        mean=mean,
        std=std,
        min=running.min_value,
        max=running.max_value,
    )


def summarize_table(table: Table) -> TableSummary:
    return TableSummary(
        row_count=table.row_count,
        column_count=table.column_count,
        columns=[summarize_column(column) for column in table.columns],
    )
