"""Statistical analysis of temperature and relative humidity measurements."""

from src.statistical_analysis.comparison import (
    NonParametricResult,
    ParametricResult,
    compare,
)
from src.statistical_analysis.pipeline import run_location_comparison, run_time_of_day_analysis
from src.statistical_analysis.report import (
    ReportCollector,
    format_comparison,
    generate_markdown_report,
)
from src.statistical_analysis.statistical_tests import (
    DegenerateInputError,
    InsufficientDataError,
    InvalidSampleError,
    StatisticalTestError,
    f_variance_test,
    pearson_correlation,
    repeated_measures_anova,
)
from src.statistical_analysis.utils import summarize_measurements

__all__ = [
    # Pipelines
    "run_time_of_day_analysis",
    "run_location_comparison",
    # Test selection
    "compare",
    "ParametricResult",
    "NonParametricResult",
    # Report generation
    "ReportCollector",
    "format_comparison",
    "generate_markdown_report",
    # Statistical tests
    "f_variance_test",
    "pearson_correlation",
    "repeated_measures_anova",
    # Errors
    "StatisticalTestError",
    "InvalidSampleError",
    "InsufficientDataError",
    "DegenerateInputError",
    # Utilities
    "summarize_measurements",
]
