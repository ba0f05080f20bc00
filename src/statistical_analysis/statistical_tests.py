import logging

import numpy as np
import pandas as pd
from scipy.stats import f, pearsonr

logger = logging.getLogger(__name__)

# Shapiro-Wilk is undefined below three observations
MIN_SAMPLE_SIZE = 3


class StatisticalTestError(ValueError):
    """Base class for inputs a statistical test cannot be run on."""


class InvalidSampleError(StatisticalTestError):
    """A sample contains non-numeric, missing or infinite values."""


class InsufficientDataError(StatisticalTestError):
    """Too few observations for the test to be defined."""


class DegenerateInputError(StatisticalTestError):
    """The test statistic is undefined for the input (e.g. zero variance)."""


def validate_sample(values, name: str = "sample", min_size: int = MIN_SAMPLE_SIZE) -> np.ndarray:
    """
    Check a sample and return it as a read-only float array.

    Args:
        values: sequence of numbers
        name (str, optional): name used in error messages. Defaults to "sample".
        min_size (int, optional): minimum number of observations. Defaults to 3.

    Raises:
        InvalidSampleError: if values are non-numeric, missing or infinite
        InsufficientDataError: if fewer than ``min_size`` observations
    """
    if values is None:
        raise InsufficientDataError(f"{name} must not be empty")
    if isinstance(values, (str, bytes)):
        raise InvalidSampleError(f"{name} must be a sequence of numbers, got a string")

    try:
        raw = np.asarray(values)
        arr = raw.astype(float)
    except (TypeError, ValueError) as e:
        raise InvalidSampleError(f"{name} contains non-numeric values: {e}") from e

    if raw.dtype == bool:
        raise InvalidSampleError(f"{name} contains boolean values, expected numbers")
    if arr.ndim != 1:
        raise InvalidSampleError(f"{name} must be one-dimensional, got {arr.ndim} dimension(s)")
    if np.any(np.isnan(arr)) or np.any(np.isinf(arr)):
        raise InvalidSampleError(f"{name} contains NaN or infinite values")
    if len(arr) < min_size:
        raise InsufficientDataError(
            f"{name} has {len(arr)} observation(s), at least {min_size} required"
        )

    arr = arr.copy()
    arr.flags.writeable = False
    return arr


def f_variance_test(sample_a, sample_b):
    """
    Two-sided F-test for equality of two variances.

    The statistic is var(a) / var(b) with (n_a - 1, n_b - 1) degrees of freedom.

    Args:
        sample_a: first sample, assumed normally distributed
        sample_b: second sample, assumed normally distributed

    Returns:
        tuple: (p_value, f_statistic)

    Raises:
        DegenerateInputError: if either sample has zero variance
    """
    a = validate_sample(sample_a, "sample_a", min_size=2)
    b = validate_sample(sample_b, "sample_b", min_size=2)

    var_a = np.var(a, ddof=1)
    var_b = np.var(b, ddof=1)
    if var_a == 0 or var_b == 0:
        raise DegenerateInputError("F-test is undefined when a sample has zero variance")

    f_stat = var_a / var_b
    df_num = len(a) - 1
    df_denom = len(b) - 1

    # p-value for two-tailed test
    p_value = 2 * min(f.cdf(f_stat, df_num, df_denom), f.sf(f_stat, df_num, df_denom))
    p_value = min(p_value, 1.0)

    return p_value, f_stat


def repeated_measures_anova(
    df: pd.DataFrame,
    value_col: str,
    subject_col: str = "Day",
    within_col: str = "Time category",
) -> dict:
    """
    One-way repeated-measures ANOVA with a single within-subject factor.

    Each subject (day) is measured at every level of the within factor (time
    of day). Repeated readings in the same cell are averaged and subjects
    missing a level are dropped.

    Parameters
    ----------
    df : pd.DataFrame
        Long-format data with one row per reading.
    value_col : str
        Dependent variable.
    subject_col : str, optional
        Column identifying the repeated unit. Defaults to "Day".
    within_col : str, optional
        Within-subject factor. Defaults to "Time category".

    Returns
    -------
    dict
        Keys: "f_statistic", "p_value", "df_effect", "df_error", "ss_effect",
        "ss_subject", "ss_error", "n_subjects", "n_levels", "level_means".

    Raises
    ------
    KeyError
        If a column is missing.
    InsufficientDataError
        If fewer than 2 complete subjects or 2 levels remain.
    DegenerateInputError
        If the error sum of squares is zero.
    """
    for col in (value_col, subject_col, within_col):
        if col not in df.columns:
            raise KeyError(f"Column not found: {col}")

    data = df[[subject_col, within_col, value_col]].dropna()
    data = data.assign(**{value_col: data[value_col].astype(float)})

    if np.any(np.isinf(data[value_col])):
        raise InvalidSampleError(f"{value_col} contains infinite values")

    cells = data.pivot_table(
        index=subject_col,
        columns=within_col,
        values=value_col,
        aggfunc="mean",
        observed=True,
    )
    # Levels nobody was measured at carry no information
    cells = cells.dropna(axis=1, how="all")

    incomplete = cells.isna().any(axis=1)
    if incomplete.any():
        logger.warning(
            f"{value_col}: dropping {int(incomplete.sum())} subject(s) without a "
            f"measurement at every level of '{within_col}'"
        )
        cells = cells[~incomplete]

    n_subjects, n_levels = cells.shape
    if n_levels < 2:
        raise InsufficientDataError(f"{value_col}: need at least 2 levels of '{within_col}'")
    if n_subjects < 2:
        raise InsufficientDataError(
            f"{value_col}: need at least 2 subjects measured at every level"
        )

    y = cells.to_numpy()
    grand_mean = y.mean()
    level_means = y.mean(axis=0)
    subject_means = y.mean(axis=1)

    ss_total = np.sum((y - grand_mean) ** 2)
    ss_effect = n_subjects * np.sum((level_means - grand_mean) ** 2)
    ss_subject = n_levels * np.sum((subject_means - grand_mean) ** 2)
    ss_error = ss_total - ss_effect - ss_subject

    df_effect = n_levels - 1
    df_error = (n_levels - 1) * (n_subjects - 1)

    if np.isclose(ss_error, 0.0, atol=1e-12 * max(ss_total, 1.0)):
        raise DegenerateInputError(
            f"{value_col}: residual sum of squares is zero, F statistic undefined"
        )

    f_stat = (ss_effect / df_effect) / (ss_error / df_error)
    p_value = f.sf(f_stat, df_effect, df_error)

    return {
        "f_statistic": float(f_stat),
        "p_value": float(p_value),
        "df_effect": int(df_effect),
        "df_error": int(df_error),
        "ss_effect": float(ss_effect),
        "ss_subject": float(ss_subject),
        "ss_error": float(ss_error),
        "n_subjects": int(n_subjects),
        "n_levels": int(n_levels),
        "level_means": dict(zip(cells.columns.astype(str), level_means.astype(float))),
    }


def pearson_correlation(x, y) -> dict:
    """
    Pearson correlation between two paired variables.

    Pairs where either value is missing are dropped.

    Returns
    -------
    dict
        Keys: "r", "p_value", "n".

    Raises
    ------
    ValueError
        If x and y differ in length.
    InsufficientDataError
        If fewer than 3 complete pairs remain.
    DegenerateInputError
        If either variable is constant.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if len(x) != len(y):
        raise ValueError(f"x and y must have the same length ({len(x)} != {len(y)})")

    mask = np.isfinite(x) & np.isfinite(y)
    n_dropped = int(len(x) - mask.sum())
    if n_dropped > 0:
        logger.debug(f"Pearson correlation: dropped {n_dropped} incomplete pair(s)")
    x, y = x[mask], y[mask]

    if len(x) < MIN_SAMPLE_SIZE:
        raise InsufficientDataError(
            f"Need at least {MIN_SAMPLE_SIZE} complete pairs for correlation, got {len(x)}"
        )
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        raise DegenerateInputError("Correlation is undefined for a constant variable")

    r, p_value = pearsonr(x, y)

    return {"r": float(r), "p_value": float(p_value), "n": int(len(x))}
