import logging

from src.data_loading.loader import (
    RH_MEAN_COLUMN,
    RH_RANGE_COLUMN,
    TEMP_MEAN_COLUMN,
    TEMP_RANGE_COLUMN,
    TIME_CATEGORY_COLUMN,
    location_samples,
)
from src.data_loading.schema import (
    DAY_COLUMN,
    RH_MAX_COLUMN,
    RH_MIN_COLUMN,
    TEMP_MAX_COLUMN,
    TEMP_MIN_COLUMN,
)
from src.statistical_analysis.comparison import compare
from src.statistical_analysis.statistical_tests import (
    StatisticalTestError,
    pearson_correlation,
    repeated_measures_anova,
)
from src.statistical_analysis.utils import summarize_measurements

logger = logging.getLogger(__name__)

ANOVA_VARIABLES = [
    RH_MAX_COLUMN,
    RH_MIN_COLUMN,
    RH_MEAN_COLUMN,
    RH_RANGE_COLUMN,
    TEMP_MAX_COLUMN,
    TEMP_MIN_COLUMN,
    TEMP_MEAN_COLUMN,
    TEMP_RANGE_COLUMN,
]

COMPARISON_VARIABLES = [RH_MEAN_COLUMN, TEMP_MEAN_COLUMN, RH_RANGE_COLUMN, TEMP_RANGE_COLUMN]

CORRELATION_PAIR = (TEMP_MEAN_COLUMN, RH_MEAN_COLUMN)


def run_time_of_day_analysis(
    df,
    variables=None,
    skip_anova=False,
    skip_correlation=False,
):
    """
    Analyse how readings at one location vary with time of day.

    Computes descriptive statistics, a repeated-measures ANOVA per variable
    (time category within day) and the Pearson correlation between mean
    temperature and mean relative humidity.

    Parameters
    ----------
    df : pd.DataFrame
        Prepared measurements of a single location.
    variables : list of str, optional
        Variables for the ANOVA. Defaults to ANOVA_VARIABLES.
    skip_anova : bool, optional
        If True, skip the repeated-measures ANOVA. Defaults to False.
    skip_correlation : bool, optional
        If True, skip the correlation analysis. Defaults to False.

    Returns
    -------
    dict
        Dictionary containing results with keys:
        - "summary": descriptive statistics DataFrame
        - "anova-{variable}": ANOVA results for each variable
        - "correlation-Temp_Mean-RH_Mean": Pearson correlation results
        A test that cannot be run is stored as {"error": message}.

    Raises
    ------
    ValueError
        If the DataFrame is empty.
    """
    if df is None or df.empty:
        raise ValueError("No measurements to analyse.")

    variables = ANOVA_VARIABLES if variables is None else list(variables)
    out = {"summary": summarize_measurements(df)}

    ##############################
    # Repeated-measures ANOVA
    ##############################

    if skip_anova:
        logger.info("Skipping repeated-measures ANOVA.")
    else:
        for variable in variables:
            key = f"anova-{variable}"
            try:
                result = repeated_measures_anova(
                    df,
                    value_col=variable,
                    subject_col=DAY_COLUMN,
                    within_col=TIME_CATEGORY_COLUMN,
                )
            except (StatisticalTestError, KeyError) as e:
                logger.error(f"ANOVA for {variable} failed: {e}")
                out[key] = {"error": str(e)}
                continue

            out[key] = result
            logger.debug(
                f"ANOVA {variable}: F({result['df_effect']}, {result['df_error']})="
                f"{result['f_statistic']:.4f}, pvalue={result['p_value']:.4f}"
            )

        logger.info(f"Ran repeated-measures ANOVA on {len(variables)} variable(s)")

    ##############################
    # Correlation
    ##############################

    if skip_correlation:
        logger.info("Skipping correlation analysis.")
    else:
        x_col, y_col = CORRELATION_PAIR
        key = f"correlation-{x_col}-{y_col}"
        try:
            out[key] = pearson_correlation(df[x_col], df[y_col])
            logger.info(
                f"Pearson correlation {x_col} vs {y_col}: r={out[key]['r']:.4f}, "
                f"pvalue={out[key]['p_value']:.4f}"
            )
        except StatisticalTestError as e:
            logger.error(f"Correlation {x_col} vs {y_col} failed: {e}")
            out[key] = {"error": str(e)}

    return out


def run_location_comparison(df, variables=None):
    """
    Compare Holding and Laboratory readings variable by variable.

    Each variable goes through the normality-based test selection in
    ``compare``.

    Parameters
    ----------
    df : pd.DataFrame
        Combined measurements with a Location column.
    variables : list of str, optional
        Variables to compare. Defaults to COMPARISON_VARIABLES.

    Returns
    -------
    dict
        "comparison-{variable}" mapped to a ParametricResult or
        NonParametricResult, or {"error": message} if the comparison failed.
    """
    variables = COMPARISON_VARIABLES if variables is None else list(variables)
    out = {}

    for variable in variables:
        key = f"comparison-{variable}"
        try:
            sample_a, sample_b = location_samples(df, variable)
            result = compare(sample_a, sample_b, variable)
        except (StatisticalTestError, KeyError) as e:
            logger.error(f"Comparison for {variable} failed: {e}")
            out[key] = {"error": str(e)}
            continue

        out[key] = result
        logger.info(f"{variable}: {result.branch} test, pvalue={result.p_value:.4f}")

    return out
