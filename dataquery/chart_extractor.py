from __future__ import annotations

import math
from typing import Any

from dataquery.column_classifier import ColumnClassification, classify_columns
from dataquery.dataset import Dataset, cell_label, parse_number
from dataquery.schemas import ChartPoint


DEFAULT_MAX_POINTS = 8


def _mentioned_column(columns: list[str], query_lower: str) -> str | None:
    for col in columns:
        if col.lower() in query_lower:
            return col
    return None


def select_columns(
    classification: ColumnClassification,
    query: str,
) -> tuple[str | None, str | None]:
    """Return (value_column, category_column) for a query.

    Defaults are the first numeric and first categorical columns; a column
    named in the query overrides its default.
    """
    if not classification.numeric_columns:
        return None, None

    query_lower = (query or "").lower()

    value_col = _mentioned_column(classification.numeric_columns, query_lower)
    if value_col is None:
        value_col = classification.numeric_columns[0]

    category_col = _mentioned_column(classification.categorical_columns, query_lower)
    if category_col is None and classification.categorical_columns:
        category_col = classification.categorical_columns[0]

    return value_col, category_col


def _aggregate_by_category(
    dataset: Dataset,
    category_col: str,
    value_col: str,
    max_points: int,
) -> list[ChartPoint]:
    totals: dict[str, float] = {}
    for index in range(len(dataset)):
        value = parse_number(dataset.get(index, value_col))
        if value is None:
            continue
        key = cell_label(dataset.get(index, category_col))
        totals[key] = totals.get(key, 0.0) + value

    # finite inputs can still overflow when summed
    totals = {key: total for key, total in totals.items() if math.isfinite(total)}

    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [ChartPoint(name=name, value=value) for name, value in ranked[:max_points]]


def _positional_points(dataset: Dataset, value_col: str, max_points: int) -> list[ChartPoint]:
    points: list[ChartPoint] = []
    for index in range(min(max_points, len(dataset))):
        value = parse_number(dataset.get(index, value_col))
        if value is None:
            continue
        points.append(ChartPoint(name=f"Item {index + 1}", value=value))
    return points


def extract_chart_points(
    dataset: Dataset,
    query: str,
    max_points: int = DEFAULT_MAX_POINTS,
) -> list[ChartPoint]:
    if dataset.is_empty or max_points <= 0:
        return []

    value_col, category_col = select_columns(classify_columns(dataset), query)
    if value_col is None:
        return []

    if category_col is not None:
        return _aggregate_by_category(dataset, category_col, value_col, max_points)
    return _positional_points(dataset, value_col, max_points)


def summarize_dataset(dataset: Dataset, sample_size: int = 5) -> dict[str, Any]:
    return {
        "total_rows": len(dataset),
        "columns": dataset.columns,
        "sample": dataset.to_records(limit=sample_size),
    }
