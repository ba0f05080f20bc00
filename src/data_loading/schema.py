from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.data_loading.utils import is_missing, parse_decimal, time_to_seconds

# ---------- Spreadsheet columns ----------

DAY_COLUMN = "Day"
TIME_COLUMN = "Time of day"
RH_MAX_COLUMN = "RH Max (%)"
RH_MIN_COLUMN = "RH Min (%)"
TEMP_MAX_COLUMN = "Temp Max (°C)"
TEMP_MIN_COLUMN = "Temp Min (°C)"

READING_COLUMNS = [RH_MAX_COLUMN, TEMP_MAX_COLUMN, RH_MIN_COLUMN, TEMP_MIN_COLUMN]
REQUIRED_COLUMNS = [DAY_COLUMN, TIME_COLUMN, *READING_COLUMNS]


# ---------- Measurement Row ----------


class MeasurementRow(BaseModel):
    """One sensor reading as it appears in a location spreadsheet."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    day: str = Field(alias=DAY_COLUMN)
    time_of_day: float = Field(alias=TIME_COLUMN)

    rh_max: float | None = Field(alias=RH_MAX_COLUMN)
    rh_min: float | None = Field(alias=RH_MIN_COLUMN)
    temp_max: float | None = Field(alias=TEMP_MAX_COLUMN)
    temp_min: float | None = Field(alias=TEMP_MIN_COLUMN)

    @field_validator("day", mode="before")
    @classmethod
    def _day_as_text(cls, value: Any) -> str:
        if is_missing(value) or str(value).strip() == "":
            raise ValueError("Day is missing")
        return str(value).strip()

    @field_validator("time_of_day", mode="before")
    @classmethod
    def _time_as_seconds(cls, value: Any) -> float:
        if is_missing(value):
            raise ValueError("Time of day is missing")
        return time_to_seconds(value)

    @field_validator("rh_max", "rh_min", "temp_max", "temp_min", mode="before")
    @classmethod
    def _reading_as_float(cls, value: Any) -> float | None:
        # Unreadable cells become missing; parse_decimal_comma reports them
        try:
            return parse_decimal(value)
        except ValueError:
            return None
