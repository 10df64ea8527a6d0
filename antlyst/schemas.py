from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

DashboardStyle = Literal["simple", "ml", "powerbi"]
ChartType = Literal["bar", "line", "scatter", "heatmap", "pie", "histogram"]
InsightType = Literal["outlier", "trend", "correlation", "general"]
Severity = Literal["info", "warning", "positive"]

MAX_INSIGHTS = 5


class Kpi(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: Union[str, int, float]
    change: str | None = None


class GridPos(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    w: int
    h: int


class ChartSpec(BaseModel):
    """Renderer-agnostic chart: trace dicts in ``data`` plus axis hints in ``layout``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: ChartType
    title: str
    data: list[dict[str, Any]]
    layout: dict[str, Any] = Field(default_factory=dict)
    grid_pos: GridPos | None = Field(default=None, alias="gridPos")


class Insight(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: InsightType
    title: str
    description: str
    severity: Severity


class DashboardConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    layout: DashboardStyle
    kpis: list[Kpi]
    charts: list[ChartSpec] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list, max_length=MAX_INSIGHTS)
    generated_at: str = Field(alias="generatedAt")

    def to_dict(self, include_timestamp: bool = True) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not include_timestamp:
            payload.pop("generatedAt", None)
        return payload
