import datetime
import logging
import re
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 3600

_WHITESPACE = re.compile(r"\s+")


def is_missing(value: Any) -> bool:
    """Return True for None, NaN and NaT scalars."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_decimal(value: Any) -> float | None:
    """
    Convert a single spreadsheet cell to float.

    Accepts numbers and strings written with a decimal comma and/or embedded
    whitespace (e.g. ``"45, 2"``). Missing or empty cells become None.

    Raises
    ------
    ValueError
        If the cell holds text that is not a number.
    """
    if is_missing(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse boolean {value!r} as a number")
    if isinstance(value, (int, float, np.number)):
        return float(value)

    cleaned = _WHITESPACE.sub("", str(value)).replace(",", ".")
    if cleaned == "":
        return None
    try:
        return float(cleaned)
    except ValueError:
        raise ValueError(f"Cannot parse {value!r} as a number") from None


def _clock_seconds(hour: int, minute: int, second: float) -> float:
    return hour * 3600 + minute * 60 + second


def time_to_seconds(value: Any) -> float:
    """
    Convert a time-of-day cell to seconds since midnight.

    Supported inputs are ``datetime.time``, ``datetime.datetime`` (including
    ``pd.Timestamp``; the date part is ignored), ``timedelta``, strings of the
    form ``HH:MM`` or ``HH:MM:SS`` and Excel day fractions in ``[0, 1)``.
    Missing values return NaN.

    Raises
    ------
    ValueError
        If the value cannot be interpreted as a time of day.
    """
    if is_missing(value):
        return np.nan

    if isinstance(value, datetime.datetime):
        return _clock_seconds(value.hour, value.minute, value.second + value.microsecond / 1e6)

    if isinstance(value, datetime.time):
        return _clock_seconds(value.hour, value.minute, value.second + value.microsecond / 1e6)

    if isinstance(value, (datetime.timedelta, pd.Timedelta)):
        seconds = pd.Timedelta(value).total_seconds()
        if not 0 <= seconds < SECONDS_PER_DAY:
            raise ValueError(f"Duration {value!r} is not a time of day")
        return float(seconds)

    if isinstance(value, (int, float, np.number)) and not isinstance(value, bool):
        # Excel stores bare times as a fraction of a day
        if 0 <= value < 1:
            return float(value) * SECONDS_PER_DAY
        raise ValueError(f"Numeric time {value!r} is not a fraction of a day")

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) in (2, 3):
            try:
                hour, minute = int(parts[0]), int(parts[1])
                second = float(parts[2]) if len(parts) == 3 else 0.0
            except ValueError:
                raise ValueError(f"Cannot parse time of day {value!r}") from None
            if 0 <= hour < 24 and 0 <= minute < 60 and 0 <= second < 60:
                return _clock_seconds(hour, minute, second)
        raise ValueError(f"Cannot parse time of day {value!r}")

    raise ValueError(f"Unsupported time of day value: {value!r}")
