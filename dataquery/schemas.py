from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dataquery.chart_type import ChartType


class ChartPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: float


class InsightResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chart_type: ChartType = Field(..., alias="chartType")
    chart_data: list[ChartPoint] = Field(default_factory=list, alias="chartData")
    insight: str


class QueryHistoryEntry(BaseModel):
    id: str
    text: str = Field(..., min_length=1)
    timestamp: datetime
