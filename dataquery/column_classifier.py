from __future__ import annotations

from dataclasses import dataclass, field

from dataquery.dataset import Dataset, Number, Text, parse_number


@dataclass(frozen=True)
class ColumnClassification:
    numeric_columns: list[str] = field(default_factory=list)
    categorical_columns: list[str] = field(default_factory=list)

    @property
    def has_numeric(self) -> bool:
        return bool(self.numeric_columns)


def classify_columns(dataset: Dataset) -> ColumnClassification:
    """Tag columns as numeric or categorical from the first row only.

    Later rows are not inspected; values that do not parse are dropped during
    aggregation instead.
    """
    if dataset.is_empty:
        return ColumnClassification()

    first_row = dataset.rows[0]
    numeric_cols: list[str] = []
    categorical_cols: list[str] = []

    for column, cell in first_row.items():
        if isinstance(cell, Number) or parse_number(cell) is not None:
            numeric_cols.append(column)
        elif isinstance(cell, Text):
            categorical_cols.append(column)

    return ColumnClassification(numeric_columns=numeric_cols, categorical_columns=categorical_cols)
