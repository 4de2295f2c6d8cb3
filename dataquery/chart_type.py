from __future__ import annotations

from typing import Literal

ChartType = Literal["bar", "line", "pie", "area"]

CHART_TYPES: tuple[str, ...] = ("bar", "line", "pie", "area")
DEFAULT_CHART_TYPE: ChartType = "bar"

# first matching row wins
_KEYWORD_RULES: tuple[tuple[tuple[str, ...], ChartType], ...] = (
    (("compare", "breakdown"), "pie"),
    (("growth", "trend", "over time"), "line"),
    (("cumulative", "total"), "area"),
)


def infer_chart_type(query: str) -> ChartType:
    text = query.lower() if isinstance(query, str) else ""
    for keywords, chart_type in _KEYWORD_RULES:
        if any(keyword in text for keyword in keywords):
            return chart_type
    return DEFAULT_CHART_TYPE


def normalize_chart_type(value: object) -> ChartType | None:
    raw = str(value or "").strip().lower()
    mapping: dict[str, ChartType] = {
        "bar": "bar",
        "column": "bar",
        "bar chart": "bar",
        "line": "line",
        "line chart": "line",
        "pie": "pie",
        "donut": "pie",
        "doughnut": "pie",
        "pie chart": "pie",
        "area": "area",
        "area chart": "area",
    }
    return mapping.get(raw)
