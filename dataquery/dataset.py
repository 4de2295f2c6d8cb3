from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterable, Iterator, Mapping, Union


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Absent:
    pass


ABSENT = Absent()

Cell = Union[Number, Text, Absent]
Row = Mapping[str, Cell]


def to_cell(raw: Any) -> Cell:
    """Tag a raw spreadsheet value; booleans, nulls and NaN become ABSENT."""
    if isinstance(raw, (Number, Text, Absent)):
        return raw
    if raw is None or isinstance(raw, bool):
        return ABSENT
    if isinstance(raw, (numbers.Real, Decimal)):
        try:
            value = float(raw)
        except (TypeError, ValueError, OverflowError):
            return ABSENT
        return Number(value) if math.isfinite(value) else ABSENT
    if isinstance(raw, str):
        return Text(raw)
    if isinstance(raw, (datetime, date, time)):
        text = raw.isoformat()
        # pandas NaT is a datetime subclass
        return ABSENT if text == "NaT" else Text(text)
    return ABSENT


def parse_number(cell: Cell) -> float | None:
    if isinstance(cell, Number):
        return cell.value if math.isfinite(cell.value) else None
    if not isinstance(cell, Text):
        return None

    text = cell.value.strip()
    # float() accepts "1_000"; spreadsheet numbers never do
    if not text or "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def cell_label(cell: Cell) -> str:
    if isinstance(cell, Text):
        return cell.value
    if isinstance(cell, Number):
        if cell.value.is_integer():
            return str(int(cell.value))
        return repr(cell.value)
    return ""


def cell_value(cell: Cell) -> Any:
    if isinstance(cell, (Number, Text)):
        return cell.value
    return None


@dataclass(frozen=True)
class Dataset:
    """Ordered rows of tagged cells. Columns come from the first row."""

    rows: tuple[Row, ...] = ()

    @classmethod
    def from_records(cls, records: Iterable[Mapping[Any, Any]]) -> "Dataset":
        rows = tuple(
            {str(key): to_cell(value) for key, value in record.items()}
            for record in records
        )
        return cls(rows=rows)

    @property
    def columns(self) -> list[str]:
        if not self.rows:
            return []
        return list(self.rows[0].keys())

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def get(self, index: int, column: str) -> Cell:
        return self.rows[index].get(column, ABSENT)

    def search(self, term: str) -> "Dataset":
        needle = (term or "").strip().lower()
        if not needle:
            return self

        matched = tuple(
            row
            for row in self.rows
            if any(
                not isinstance(cell, Absent) and needle in cell_label(cell).lower()
                for cell in row.values()
            )
        )
        return Dataset(rows=matched)

    def preview(self, limit: int = 100) -> "Dataset":
        return Dataset(rows=self.rows[: max(0, int(limit))])

    def to_records(self, limit: int | None = None) -> list[dict[str, Any]]:
        rows = self.rows if limit is None else self.rows[: max(0, int(limit))]
        return [{key: cell_value(cell) for key, cell in row.items()} for row in rows]
