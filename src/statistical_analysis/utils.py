import logging

import pandas as pd

from src.data_loading.loader import (
    RH_MEAN_COLUMN,
    RH_RANGE_COLUMN,
    TEMP_MEAN_COLUMN,
    TEMP_RANGE_COLUMN,
)
from src.data_loading.schema import READING_COLUMNS

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    *READING_COLUMNS,
    RH_MEAN_COLUMN,
    RH_RANGE_COLUMN,
    TEMP_MEAN_COLUMN,
    TEMP_RANGE_COLUMN,
]

SUMMARY_STATISTICS = ["Min.", "1st Qu.", "Median", "Mean", "3rd Qu.", "Max.", "NA's"]


def summarize_measurements(df, columns=None):
    """
    Compute descriptive statistics for numeric measurement columns.

    Parameters
    ----------
    df : pd.DataFrame
        Prepared measurement data.
    columns : list of str, optional
        Columns to summarize. Defaults to the raw readings and the derived
        mean/range columns.

    Returns
    -------
    pd.DataFrame
        One row per column with Min., 1st Qu., Median, Mean, 3rd Qu., Max.
        and the number of missing values (NA's).

    Raises
    ------
    KeyError
        If a requested column is missing.
    """
    columns = SUMMARY_COLUMNS if columns is None else list(columns)

    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise KeyError(f"Columns not found: {', '.join(missing)}")

    rows = {}
    for col in columns:
        values = pd.to_numeric(df[col], errors="coerce")
        rows[col] = [
            values.min(),
            values.quantile(0.25),
            values.median(),
            values.mean(),
            values.quantile(0.75),
            values.max(),
            int(values.isna().sum()),
        ]

    summary = pd.DataFrame.from_dict(rows, orient="index", columns=SUMMARY_STATISTICS)
    summary["NA's"] = summary["NA's"].astype(int)
    return summary
