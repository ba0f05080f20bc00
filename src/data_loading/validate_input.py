import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from src.data_loading.schema import REQUIRED_COLUMNS, MeasurementRow


class ValidationError(Exception):
    pass


def validate_measurements(df: pd.DataFrame) -> None:
    """
    Validate a raw measurement sheet before preprocessing.

    Expected columns (extra columns are ignored):
        Day, Time of day, RH Max (%), Temp Max (°C), RH Min (%), Temp Min (°C)

    Readings may be numbers or text with a decimal comma; missing readings are
    allowed. Day and time of day must be present on every row.

    Args:
        df: DataFrame as read from the spreadsheet

    Returns:
        None on successful validation

    Raises:
        ValidationError: If validation fails, with all error messages concatenated
    """
    if df is None or not isinstance(df, pd.DataFrame):
        raise ValidationError("Measurements must be a pandas DataFrame.")

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    if df.empty:
        raise ValidationError("Measurement sheet contains no rows.")

    errors = []

    for idx, record in zip(df.index, df[REQUIRED_COLUMNS].to_dict("records")):
        try:
            MeasurementRow.model_validate(record)
        except PydanticValidationError as e:
            for err in e.errors():
                column = err["loc"][0] if err["loc"] else "?"
                errors.append(f"Row {idx}: {column}: {err['msg']}")

    if errors:
        raise ValidationError("\n".join(errors))
