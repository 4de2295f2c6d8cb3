from __future__ import annotations

import re

from dataquery.dataset import Dataset


NO_DATA_SUGGESTIONS = [
    "Upload a file to generate insights",
    "Import your data to begin analysis",
]

GENERIC_SUGGESTIONS = [
    "Summarize the data",
    "Show key insights from data",
    "What are the main trends?",
    "Compare top values",
]

_COLUMN_FAMILIES: list[tuple[re.Pattern[str], tuple[str, str]]] = [
    (re.compile(r"sales|revenue|income", re.IGNORECASE), ("Show me revenue trends", "Compare sales by category")),
    (
        re.compile(r"user|customer|client", re.IGNORECASE),
        ("How many customers do we have?", "Show customer distribution"),
    ),
    (
        re.compile(r"region|country|location|city", re.IGNORECASE),
        ("Compare data by region", "Show top performing regions"),
    ),
    (
        re.compile(r"date|month|year|quarter", re.IGNORECASE),
        ("Show monthly growth trends", "What's our year-over-year performance?"),
    ),
    (
        re.compile(r"product|item|sku", re.IGNORECASE),
        ("What are our top products?", "Compare product performance"),
    ),
]


def suggest_queries(dataset: Dataset | None, limit: int = 4) -> list[str]:
    if dataset is None or dataset.is_empty:
        return list(NO_DATA_SUGGESTIONS)

    columns = dataset.columns
    suggestions: list[str] = []
    for pattern, queries in _COLUMN_FAMILIES:
        if any(pattern.search(col) for col in columns):
            suggestions.extend(queries)

    for query in GENERIC_SUGGESTIONS:
        if len(suggestions) >= limit:
            break
        if query not in suggestions:
            suggestions.append(query)

    return suggestions[:limit]
