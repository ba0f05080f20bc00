import logging
from pathlib import Path

import numpy as np
import pandas as pd

from src.data_loading.schema import (
    DAY_COLUMN,
    READING_COLUMNS,
    RH_MAX_COLUMN,
    RH_MIN_COLUMN,
    TEMP_MAX_COLUMN,
    TEMP_MIN_COLUMN,
    TIME_COLUMN,
)
from src.data_loading.utils import SECONDS_PER_DAY, is_missing, parse_decimal, time_to_seconds
from src.data_loading.validate_input import validate_measurements

logger = logging.getLogger(__name__)

# Derived columns
RH_MEAN_COLUMN = "RH_Mean"
RH_RANGE_COLUMN = "RH_Range"
TEMP_MEAN_COLUMN = "Temp_Mean"
TEMP_RANGE_COLUMN = "Temp_Range"
TIME_SECONDS_COLUMN = "Time (s)"
TIME_CATEGORY_COLUMN = "Time category"
LOCATION_COLUMN = "Location"

HOLDING = "Holding"
LABORATORY = "Laboratory"

# Time-of-day bins: [0h, 10h) -> 08, [10h, 14h) -> 12, [14h, 24h) -> 16
TIME_BIN_EDGES = [0, 10 * 3600, 14 * 3600, SECONDS_PER_DAY]
TIME_CATEGORIES = ["08", "12", "16"]

# Legacy .xls workbooks need xlrd, openpyxl reads the rest
EXCEL_ENGINES = {".xlsx": "openpyxl", ".xlsm": "openpyxl", ".xls": "xlrd"}


def read_measurements(path: str | Path, location: str | None = None) -> pd.DataFrame:
    """
    Read a raw measurement sheet from an Excel workbook or CSV file.

    Parameters
    ----------
    path : str or Path
        Path to a ``.xlsx``/``.xlsm``/``.xls`` workbook (first sheet is used) or ``.csv``.
    location : str, optional
        If given, added as a ``Location`` column on every row.

    Returns
    -------
    pd.DataFrame
        Raw sheet contents with fully empty rows removed. No type conversion
        is applied.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file type is not supported.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Measurement file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in EXCEL_ENGINES:
        df = pd.read_excel(path, engine=EXCEL_ENGINES[suffix])
    elif suffix == ".csv":
        # Keep cells as text so decimal commas survive until preprocessing
        df = pd.read_csv(path, dtype=str)
    else:
        raise ValueError(f"Unsupported measurement file type '{suffix}': {path}")

    df = df.dropna(how="all").reset_index(drop=True)
    logger.info(f"Read {len(df)} rows from {path.name}")

    if location is not None:
        df[LOCATION_COLUMN] = location

    return df


def parse_decimal_comma(series: pd.Series) -> pd.Series:
    """
    Convert a column of readings to float, accepting decimal commas.

    Whitespace is removed and commas are treated as decimal points. Values
    that still cannot be parsed become NaN and are reported with a warning.
    """
    if pd.api.types.is_numeric_dtype(series):
        return series.astype(float)

    def _convert(value):
        try:
            result = parse_decimal(value)
        except ValueError:
            return np.nan
        return np.nan if result is None else result

    converted = series.map(_convert).astype(float)

    n_bad = int((converted.isna() & ~series.map(is_missing)).sum())
    if n_bad > 0:
        logger.warning(f"Column '{series.name}': {n_bad} value(s) could not be parsed, set to NaN")

    return converted


def add_derived_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with mean and range columns for RH and temperature."""
    out = df.copy()
    out[RH_MEAN_COLUMN] = (out[RH_MAX_COLUMN] + out[RH_MIN_COLUMN]) / 2
    out[RH_RANGE_COLUMN] = out[RH_MAX_COLUMN] - out[RH_MIN_COLUMN]
    out[TEMP_MEAN_COLUMN] = (out[TEMP_MAX_COLUMN] + out[TEMP_MIN_COLUMN]) / 2
    out[TEMP_RANGE_COLUMN] = out[TEMP_MAX_COLUMN] - out[TEMP_MIN_COLUMN]
    return out


def categorize_time_of_day(times: pd.Series) -> pd.Series:
    """
    Bin times of day into the three measurement slots "08", "12" and "16".

    Parameters
    ----------
    times : pd.Series
        Times of day in any format accepted by ``time_to_seconds``.

    Returns
    -------
    pd.Series
        Categorical series with categories ``TIME_CATEGORIES``.
    """
    seconds = times.map(time_to_seconds).astype(float)
    return pd.cut(
        seconds,
        bins=TIME_BIN_EDGES,
        labels=TIME_CATEGORIES,
        right=False,
        include_lowest=True,
    )


def prepare_measurements(df: pd.DataFrame, location: str | None = None) -> pd.DataFrame:
    """
    Validate a raw sheet and add the columns used by the analyses.

    Converts the four reading columns to float, adds mean/range columns,
    seconds since midnight, the time-of-day category, and makes ``Day``
    categorical.

    Raises
    ------
    ValidationError
        If the sheet does not match the expected layout.
    """
    validate_measurements(df)

    out = df.copy()
    for col in READING_COLUMNS:
        out[col] = parse_decimal_comma(out[col])

    out = add_derived_columns(out)
    out[TIME_SECONDS_COLUMN] = out[TIME_COLUMN].map(time_to_seconds).astype(float)
    out[TIME_CATEGORY_COLUMN] = categorize_time_of_day(out[TIME_COLUMN])
    out[DAY_COLUMN] = out[DAY_COLUMN].astype(str).str.strip().astype("category")

    if location is not None:
        out[LOCATION_COLUMN] = location

    logger.debug(
        f"Prepared {len(out)} rows, time categories: "
        f"{out[TIME_CATEGORY_COLUMN].value_counts().sort_index().to_dict()}"
    )
    return out


def load_measurements(path: str | Path, location: str | None = None) -> pd.DataFrame:
    """Read and prepare a measurement sheet."""
    return prepare_measurements(read_measurements(path), location=location)


def combine_locations(holding_df: pd.DataFrame, laboratory_df: pd.DataFrame) -> pd.DataFrame:
    """
    Stack the Holding and Laboratory sheets into one frame with a Location column.

    The inputs are not modified.
    """
    holding = holding_df.copy()
    laboratory = laboratory_df.copy()
    holding[LOCATION_COLUMN] = HOLDING
    laboratory[LOCATION_COLUMN] = LABORATORY

    combined = pd.concat([holding, laboratory], ignore_index=True)
    if DAY_COLUMN in combined.columns:
        combined[DAY_COLUMN] = combined[DAY_COLUMN].astype(str).astype("category")
    return combined


def load_locations(lab_path: str | Path, holding_path: str | Path) -> pd.DataFrame:
    """Load both location sheets and combine them (Holding rows first)."""
    holding = load_measurements(holding_path, location=HOLDING)
    laboratory = load_measurements(lab_path, location=LABORATORY)
    return combine_locations(holding, laboratory)


def location_samples(
    df: pd.DataFrame,
    variable: str,
    group_a: str = HOLDING,
    group_b: str = LABORATORY,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Split one variable into a sample per location.

    Missing readings are dropped with a warning so the samples only hold
    finite values.

    Raises
    ------
    KeyError
        If the variable or the Location column is not present.
    """
    if variable not in df.columns:
        raise KeyError(f"Unknown variable: {variable}")
    if LOCATION_COLUMN not in df.columns:
        raise KeyError(f"DataFrame has no '{LOCATION_COLUMN}' column")

    samples = []
    for group in (group_a, group_b):
        values = df.loc[df[LOCATION_COLUMN] == group, variable].astype(float)
        n_missing = int(values.isna().sum())
        if n_missing > 0:
            logger.warning(f"{variable} ({group}): dropping {n_missing} missing value(s)")
        samples.append(values.dropna().to_numpy())

    return samples[0], samples[1]
