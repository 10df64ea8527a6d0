from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone

from antlyst.ingest import read_table
from antlyst.insights import generate_insights
from antlyst.schemas import ChartSpec, DashboardConfiguration, GridPos, Kpi
from antlyst.table import Column, Table, json_value

logger = logging.getLogger(__name__)

TOP_CATEGORY_LIMIT = 10
BAR_COLOR = "#5e30eb"
HISTOGRAM_COLOR = "#52d6fc"
SCATTER_COLOR = "#d946ef"

GRID_WIDTH = 12
POWERBI_GRID_SLOTS = (
    GridPos(x=0, y=0, w=GRID_WIDTH // 2, h=4),
    GridPos(x=GRID_WIDTH // 2, y=0, w=GRID_WIDTH // 2, h=4),
)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def top_categories(column: Column, limit: int = TOP_CATEGORY_LIMIT) -> list[tuple[str, int]]:
    # Counter preserves first-seen order and most_common sorts stably, so ties keep that order.
    return Counter(column.present_values).most_common(limit)


def _category_bar_chart(column: Column) -> ChartSpec:
    counts = top_categories(column)
    return ChartSpec(
        id="chart-1",
        type="bar",
        title=f"Top {TOP_CATEGORY_LIMIT} {column.name}",
        data=[
            {
                "type": "bar",
                "x": [value for value, _ in counts],
                "y": [count for _, count in counts],
                "marker": {"color": BAR_COLOR},
            }
        ],
        layout={"xaxis": {"title": column.name}, "yaxis": {"title": "Count"}},
    )


def _histogram_chart(column: Column) -> ChartSpec:
    return ChartSpec(
        id="chart-2",
        type="histogram",
        title=f"Distribution of {column.name}",
        data=[
            {
                "type": "histogram",
                "x": [json_value(value) for value in column.present_values],
                "marker": {"color": HISTOGRAM_COLOR},
            }
        ],
        layout={"xaxis": {"title": column.name}, "yaxis": {"title": "Frequency"}},
    )


def _scatter_chart(left: Column, right: Column) -> ChartSpec:
    pairs = [(x, y) for x, y in zip(left.values, right.values) if x is not None and y is not None]
    return ChartSpec(
        id="ml-scatter",
        type="scatter",
        title=f"Correlation: {left.name} vs {right.name}",
        data=[
            {
                "type": "scatter",
                "mode": "markers",
                "x": [json_value(x) for x, _ in pairs],
                "y": [json_value(y) for _, y in pairs],
                "marker": {"color": SCATTER_COLOR, "opacity": 0.6},
            }
        ],
        layout={"xaxis": {"title": left.name}, "yaxis": {"title": right.name}},
    )


def _simple_parts(table: Table) -> tuple[list[Kpi], list[ChartSpec]]:
    kpis = [
        Kpi(label="Total Rows", value=f"{table.row_count:,}"),
        Kpi(label="Total Columns", value=f"{table.column_count:,}"),
    ]
    charts: list[ChartSpec] = []

    text_columns = table.text_columns
    if text_columns:
        charts.append(_category_bar_chart(text_columns[0]))
    else:
        logger.debug("No text column; category bar chart omitted")

    numeric_columns = table.numeric_columns
    if numeric_columns:
        charts.append(_histogram_chart(numeric_columns[0]))
    else:
        logger.debug("No numeric column; histogram omitted")
    return kpis, charts


def generate_simple_dashboard(table: Table) -> DashboardConfiguration:
    kpis, charts = _simple_parts(table)
    return DashboardConfiguration(layout="simple", kpis=kpis, charts=charts, generated_at=_utc_now_iso())


def generate_ml_dashboard(table: Table) -> DashboardConfiguration:
    charts: list[ChartSpec] = []
    numeric_columns = table.numeric_columns
    if len(numeric_columns) >= 2:
        charts.append(_scatter_chart(numeric_columns[0], numeric_columns[1]))
    else:
        logger.debug("Fewer than two numeric columns; scatter omitted")

    kpis = [
        Kpi(label="Dataset Size", value=table.row_count),
        Kpi(label="Features", value=table.column_count),
    ]
    return DashboardConfiguration(layout="ml", kpis=kpis, charts=charts, generated_at=_utc_now_iso())


def assign_grid_positions(charts: list[ChartSpec]) -> list[ChartSpec]:
    """Place the first two charts side by side; later charts are left unplaced."""
    placed: list[ChartSpec] = []
    for index, chart in enumerate(charts):
        if index < len(POWERBI_GRID_SLOTS):
            chart = chart.model_copy(update={"grid_pos": POWERBI_GRID_SLOTS[index]})
        placed.append(chart)
    return placed


def generate_powerbi_dashboard(table: Table) -> DashboardConfiguration:
    kpis, charts = _simple_parts(table)
    return DashboardConfiguration(
        layout="powerbi",
        kpis=kpis,
        charts=assign_grid_positions(charts),
        generated_at=_utc_now_iso(),
    )


GENERATORS = {
    "simple": generate_simple_dashboard,
    "ml": generate_ml_dashboard,
    "powerbi": generate_powerbi_dashboard,
}


def generate_for_table(table: Table, style: str = "simple") -> DashboardConfiguration:
    generator = GENERATORS.get(style)
    if generator is None:
        logger.warning("Unknown dashboard style '%s'; falling back to 'simple'", style)
        generator = generate_simple_dashboard

    insights = generate_insights(table)
    config = generator(table)
    return config.model_copy(update={"insights": insights})


def generate_dashboard(
    raw: bytes | bytearray | str, style: str = "simple", max_rows: int | None = None
) -> DashboardConfiguration:
    """
    Parse raw CSV content and build the dashboard configuration for ``style``.

    Raises ``ParseError`` when the content has no header or no data rows. Every
    other degraded input yields a valid, possibly chart-less, configuration.
    """
    table = read_table(raw, max_rows=max_rows)
    config = generate_for_table(table, style)
    logger.info(
        "Generated %s dashboard: rows=%d columns=%d charts=%d insights=%d",
        config.layout,
        table.row_count,
        table.column_count,
        len(config.charts),
        len(config.insights),
    )
    return config
