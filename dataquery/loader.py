from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pandas as pd

from dataquery.dataset import Dataset


logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")


class DatasetLoadError(ValueError):
    """Raised when an uploaded table cannot be turned into a dataset."""


def _read_frame(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    # first sheet only
    return pd.read_excel(path, sheet_name=0)


def load_table_file(path: str | Path) -> Dataset:
    """Read a CSV or Excel file into a Dataset."""
    file_path = Path(path)
    if file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise DatasetLoadError("Please upload a CSV or Excel file")
    if not file_path.exists():
        raise DatasetLoadError(f"File not found: {file_path}")

    try:
        df = _read_frame(file_path)
    except (ValueError, OSError, zipfile.BadZipFile) as exc:
        raise DatasetLoadError(f"Error processing file: {exc}") from exc

    dataset = Dataset.from_records(df.to_dict(orient="records"))
    if dataset.is_empty:
        raise DatasetLoadError("No data found in file")

    logger.info("Loaded %d rows from %s", len(dataset), file_path.name)
    return dataset
