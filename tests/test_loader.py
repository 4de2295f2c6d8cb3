import pandas as pd
import pytest

from dataquery.chart_extractor import extract_chart_points
from dataquery.dataset import ABSENT, Number, Text
from dataquery.loader import DatasetLoadError, load_table_file


def test_load_csv_tags_cells(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text("region,revenue,note\nNorth,100,\nSouth,50,late\nNorth,30,\n", encoding="utf-8")

    dataset = load_table_file(path)

    assert len(dataset) == 3
    assert dataset.columns == ["region", "revenue", "note"]
    assert dataset.get(0, "region") == Text("North")
    assert dataset.get(0, "revenue") == Number(100.0)
    assert dataset.get(0, "note") is ABSENT
    assert [(p.name, p.value) for p in extract_chart_points(dataset, "revenue")] == [
        ("North", 130.0),
        ("South", 50.0),
    ]


def test_load_excel_reads_first_sheet(tmp_path):
    path = tmp_path / "book.xlsx"
    with pd.ExcelWriter(path) as writer:
        pd.DataFrame({"product": ["A", "B"], "units": [3, 4]}).to_excel(writer, sheet_name="first", index=False)
        pd.DataFrame({"other": [1]}).to_excel(writer, sheet_name="second", index=False)

    dataset = load_table_file(path)

    assert dataset.columns == ["product", "units"]
    assert dataset.get(1, "units") == Number(4.0)


def test_unsupported_extension_is_rejected(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    with pytest.raises(DatasetLoadError, match="CSV or Excel"):
        load_table_file(path)


def test_header_only_file_has_no_data(tmp_path):
    path = tmp_path / "empty.CSV"
    path.write_text("a,b\n", encoding="utf-8")

    with pytest.raises(DatasetLoadError, match="No data found"):
        load_table_file(path)


def test_missing_file_is_reported(tmp_path):
    with pytest.raises(DatasetLoadError, match="not found"):
        load_table_file(tmp_path / "missing.csv")


def test_corrupt_workbook_is_reported(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"PK\x03\x04 this is not a real workbook")

    with pytest.raises(DatasetLoadError, match="Error processing file"):
        load_table_file(path)
