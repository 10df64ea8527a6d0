"""
Heuristic insights over numeric columns.

Two passes run over the numeric columns in header order: high-side outliers
first, then first-half/second-half trends. The combined list is cut to
``MAX_INSIGHTS``; when nothing fires a single "Consistent Data" insight is
returned instead.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from antlyst.schemas import MAX_INSIGHTS, Insight
from antlyst.stats import ColumnSummary, RunningStats, summarize_column
from antlyst.table import Column, Table

logger = logging.getLogger(__name__)

OUTLIER_Z_THRESHOLD = 3.0
TREND_MIN_VALUES = 10
TREND_PERCENT_THRESHOLD = 20.0

STABLE_DATA_INSIGHT = Insight(
    type="general",
    title="Consistent Data",
    description="No significant outliers or strong trends detected. The data appears stable.",
    severity="info",
)


def detect_outlier(summary: ColumnSummary) -> Optional[Insight]:
    if not summary.has_stats or summary.max is None or not summary.std:
        return None
    z_score = (summary.max - summary.mean) / summary.std
    if z_score <= OUTLIER_Z_THRESHOLD:
        return None
    return Insight(
        type="outlier",
        title=f"Extreme Value in {summary.name}",
        description=(
            f"The maximum value ({summary.max:.2f}) is significantly higher (> 3σ) "
            f"than the average ({summary.mean:.2f})."
        ),
        severity="warning",
    )


def half_split_change(values: Sequence[Optional[float]]) -> Optional[float]:
    """
    Percent change between the means of the first and second half of the rows.

    The split is by row position, missing cells included; each half's mean
    uses only its present values.
    """
    half = len(values) // 2
    first = [value for value in values[:half] if value is not None]
    second = [value for value in values[half:] if value is not None]
    if not first or not second:
        return None
    first_mean = RunningStats().extend(first).mean
    second_mean = RunningStats().extend(second).mean
    if first_mean == 0:
        return None
    change = (second_mean - first_mean) / first_mean * 100
    return change if math.isfinite(change) else None


def detect_trend(column: Column) -> Optional[Insight]:
    if len(column.values) <= TREND_MIN_VALUES:
        return None
    percent_change = half_split_change(column.values)
    if percent_change is None:
        logger.debug("Skipping trend for '%s': percent change is undefined", column.name)
        return None
    if abs(percent_change) <= TREND_PERCENT_THRESHOLD:
        return None
    increasing = percent_change > 0
    return Insight(
        type="trend",
        title=f"{'Upward' if increasing else 'Downward'} Trend in {column.name}",
        description=(
            f"Values have {'increased' if increasing else 'decreased'} by approximately "
            f"{abs(percent_change):.1f}% from the first half to the second half of the dataset."
        ),
        severity="positive" if increasing else "info",
    )


def generate_insights(table: Table) -> list[Insight]:
    insights: list[Insight] = []
    numeric_columns = table.numeric_columns

    for column in numeric_columns:
        try:
            found = detect_outlier(summarize_column(column))
        except Exception:
            logger.exception("Outlier check failed for column '%s'", column.name)
            continue
        if found is not None:
            insights.append(found)

    for column in numeric_columns:
        try:
            found = detect_trend(column)
        except Exception:
            logger.exception("Trend check failed for column '%s'", column.name)
            continue
        if found is not None:
            insights.append(found)

    if not insights:
        return [STABLE_DATA_INSIGHT]
    return insights[:MAX_INSIGHTS]
