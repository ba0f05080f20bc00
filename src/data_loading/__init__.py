"""Loading and preprocessing of the temperature/humidity measurement sheets."""

from src.data_loading.loader import (
    HOLDING,
    LABORATORY,
    add_derived_columns,
    categorize_time_of_day,
    combine_locations,
    load_locations,
    load_measurements,
    location_samples,
    parse_decimal_comma,
    prepare_measurements,
    read_measurements,
)
from src.data_loading.schema import MeasurementRow
from src.data_loading.utils import parse_decimal, time_to_seconds
from src.data_loading.validate_input import ValidationError, validate_measurements

__all__ = [
    # Reading
    "read_measurements",
    "load_measurements",
    "load_locations",
    # Preprocessing
    "parse_decimal_comma",
    "add_derived_columns",
    "categorize_time_of_day",
    "prepare_measurements",
    "combine_locations",
    "location_samples",
    "HOLDING",
    "LABORATORY",
    # Schema and validation
    "MeasurementRow",
    "ValidationError",
    "validate_measurements",
    # Utilities
    "parse_decimal",
    "time_to_seconds",
]
