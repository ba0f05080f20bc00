"""Tests for pipeline module."""

import pandas as pd
import pytest

from src.data_loading.loader import combine_locations, prepare_measurements
from src.statistical_analysis.comparison import NonParametricResult, ParametricResult
from src.statistical_analysis.pipeline import (
    ANOVA_VARIABLES,
    COMPARISON_VARIABLES,
    run_location_comparison,
    run_time_of_day_analysis,
)
from tests.generate_synthetic_sheets import generate_synthetic_sheet


@pytest.fixture
def lab_df():
    return prepare_measurements(generate_synthetic_sheet(seed=7))


@pytest.fixture
def combined_df():
    holding = prepare_measurements(generate_synthetic_sheet(seed=8, rh_base=60.0))
    laboratory = prepare_measurements(generate_synthetic_sheet(seed=9))
    return combine_locations(holding, laboratory)


# ─────────────────────────────────────────────────────────────────────────────
# Time-of-day analysis
# ─────────────────────────────────────────────────────────────────────────────


class TestRunTimeOfDayAnalysis:
    def test_output_keys(self, lab_df):
        output = run_time_of_day_analysis(lab_df)

        expected = {"summary", "correlation-Temp_Mean-RH_Mean"}
        expected.update(f"anova-{v}" for v in ANOVA_VARIABLES)
        assert set(output) == expected

    def test_summary_is_dataframe(self, lab_df):
        output = run_time_of_day_analysis(lab_df)
        assert isinstance(output["summary"], pd.DataFrame)
        assert "RH_Mean" in output["summary"].index

    def test_anova_result_fields(self, lab_df):
        result = run_time_of_day_analysis(lab_df)["anova-RH_Mean"]

        assert result["n_subjects"] == 5
        assert result["n_levels"] == 3
        assert result["df_effect"] == 2
        assert result["df_error"] == 8
        assert 0 <= result["p_value"] <= 1

    def test_strong_time_effect_detected(self):
        df = prepare_measurements(generate_synthetic_sheet(seed=11, time_effect=5.0))
        output = run_time_of_day_analysis(df, variables=["RH_Mean"])

        assert output["anova-RH_Mean"]["p_value"] < 0.001
        means = output["anova-RH_Mean"]["level_means"]
        assert means["08"] < means["12"] < means["16"]

    def test_correlation_result(self, lab_df):
        result = run_time_of_day_analysis(lab_df)["correlation-Temp_Mean-RH_Mean"]
        assert -1 <= result["r"] <= 1
        assert result["n"] == len(lab_df)

    def test_skip_anova(self, lab_df):
        output = run_time_of_day_analysis(lab_df, skip_anova=True)
        assert not any(key.startswith("anova-") for key in output)
        assert "correlation-Temp_Mean-RH_Mean" in output

    def test_skip_correlation(self, lab_df):
        output = run_time_of_day_analysis(lab_df, skip_correlation=True)
        assert not any(key.startswith("correlation-") for key in output)

    def test_custom_variables(self, lab_df):
        output = run_time_of_day_analysis(lab_df, variables=["Temp_Mean"], skip_correlation=True)
        assert set(output) == {"summary", "anova-Temp_Mean"}

    def test_failed_test_stored_as_error(self, lab_df):
        lab_df["Temp_Range"] = 1.0

        output = run_time_of_day_analysis(lab_df)

        assert "error" in output["anova-Temp_Range"]
        assert "error" not in output["anova-RH_Mean"]

    def test_unknown_variable_stored_as_error(self, lab_df):
        output = run_time_of_day_analysis(lab_df, variables=["CO2"], skip_correlation=True)
        assert "error" in output["anova-CO2"]

    def test_empty_dataframe_raises(self, lab_df):
        with pytest.raises(ValueError, match="No measurements"):
            run_time_of_day_analysis(lab_df.iloc[0:0])


# ─────────────────────────────────────────────────────────────────────────────
# Location comparison
# ─────────────────────────────────────────────────────────────────────────────


class TestRunLocationComparison:
    def test_output_keys(self, combined_df):
        output = run_location_comparison(combined_df)
        assert list(output) == [f"comparison-{v}" for v in COMPARISON_VARIABLES]

    def test_results_are_comparison_results(self, combined_df):
        output = run_location_comparison(combined_df)
        for variable, result in zip(COMPARISON_VARIABLES, output.values()):
            assert isinstance(result, (ParametricResult, NonParametricResult))
            assert result.label == variable

    def test_detects_humidity_difference(self, combined_df):
        result = run_location_comparison(combined_df, variables=["RH_Mean"])["comparison-RH_Mean"]
        assert result.p_value < 0.001

    def test_too_few_readings_stored_as_error(self):
        holding = prepare_measurements(generate_synthetic_sheet(seed=8).iloc[:2])
        laboratory = prepare_measurements(generate_synthetic_sheet(seed=9))
        combined = combine_locations(holding, laboratory)

        output = run_location_comparison(combined, variables=["RH_Mean"])

        assert "at least 3" in output["comparison-RH_Mean"]["error"]

    def test_unknown_variable_stored_as_error(self, combined_df):
        output = run_location_comparison(combined_df, variables=["CO2"])
        assert "error" in output["comparison-CO2"]
