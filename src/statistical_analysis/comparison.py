"""
Choice of a two-sample location test based on normality.

Both samples are checked with Shapiro-Wilk. When both look normal an F-test
decides between a pooled and a Welch t-test; otherwise the Wilcoxon rank-sum
(Mann-Whitney U) test is used and no variance test is run.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.stats import mannwhitneyu, shapiro, ttest_ind

from src.statistical_analysis.statistical_tests import (
    DegenerateInputError,
    f_variance_test,
    validate_sample,
)

logger = logging.getLogger(__name__)

ALPHA = 0.05

# Rank-sum p-values use the exact distribution below this size when there are no ties
EXACT_RANK_SUM_MAX_SIZE = 50

PARAMETRIC = "parametric"
NON_PARAMETRIC = "non-parametric"


@dataclass(frozen=True)
class NormalityResult:
    """Shapiro-Wilk outcome for one sample."""

    statistic: float
    p_value: float

    @property
    def is_normal(self) -> bool:
        return self.p_value > ALPHA


@dataclass(frozen=True)
class VarianceTestResult:
    """F-test for equal variances."""

    statistic: float
    df_num: int
    df_denom: int
    p_value: float
    equal_variance: bool


@dataclass(frozen=True)
class TTestResult:
    statistic: float
    df: float
    p_value: float
    equal_variance: bool


@dataclass(frozen=True)
class RankSumResult:
    """Wilcoxon rank-sum test; ``statistic`` is the U statistic of sample A."""

    statistic: float
    p_value: float


@dataclass(frozen=True)
class ParametricResult:
    label: str
    normality_a: NormalityResult
    normality_b: NormalityResult
    variance_test: VarianceTestResult
    t_test: TTestResult
    branch: str = PARAMETRIC

    @property
    def p_value(self) -> float:
        return self.t_test.p_value


@dataclass(frozen=True)
class NonParametricResult:
    label: str
    normality_a: NormalityResult
    normality_b: NormalityResult
    rank_sum: RankSumResult
    branch: str = NON_PARAMETRIC

    @property
    def p_value(self) -> float:
        return self.rank_sum.p_value


ComparisonResult = ParametricResult | NonParametricResult


def _check_finite(label: str, test_name: str, *values: float) -> None:
    if not all(np.isfinite(v) for v in values):
        raise DegenerateInputError(f"{label}: {test_name} produced an undefined statistic")


def _normality(sample: np.ndarray, label: str) -> NormalityResult:
    if np.ptp(sample) == 0:
        raise DegenerateInputError(
            f"{label}: Shapiro-Wilk test is undefined when all values are identical"
        )
    statistic, p_value = shapiro(sample)
    _check_finite(label, "Shapiro-Wilk test", statistic, p_value)
    return NormalityResult(statistic=float(statistic), p_value=float(p_value))


def _rank_sum_method(a: np.ndarray, b: np.ndarray) -> str:
    """Exact p-value for small tie-free samples, normal approximation otherwise."""
    pooled = np.concatenate([a, b])
    has_ties = len(np.unique(pooled)) < len(pooled)
    if len(a) < EXACT_RANK_SUM_MAX_SIZE and len(b) < EXACT_RANK_SUM_MAX_SIZE and not has_ties:
        return "exact"
    return "asymptotic"


def compare(sample_a, sample_b, label: str) -> ComparisonResult:
    """
    Test two independent samples for a difference in location.

    Parameters
    ----------
    sample_a, sample_b : sequence of float
        Measurements of the same variable under two conditions. At least three
        finite values each.
    label : str
        Name of the variable, carried into the result for reporting.

    Returns
    -------
    ParametricResult or NonParametricResult
        ParametricResult when both Shapiro-Wilk p-values exceed 0.05,
        otherwise NonParametricResult.

    Raises
    ------
    InvalidSampleError
        If a sample contains non-numeric, missing or infinite values.
    InsufficientDataError
        If a sample has fewer than three observations.
    DegenerateInputError
        If a test statistic is undefined for the data (e.g. zero variance).
    """
    a = validate_sample(sample_a, "sample_a")
    b = validate_sample(sample_b, "sample_b")

    normality_a = _normality(a, label)
    normality_b = _normality(b, label)
    logger.debug(
        f"{label}: Shapiro-Wilk p-values {normality_a.p_value:.4f}, {normality_b.p_value:.4f}"
    )

    if normality_a.is_normal and normality_b.is_normal:
        p_f, f_stat = f_variance_test(a, b)
        _check_finite(label, "F-test", f_stat, p_f)
        equal_variance = p_f > ALPHA
        variance_test = VarianceTestResult(
            statistic=float(f_stat),
            df_num=len(a) - 1,
            df_denom=len(b) - 1,
            p_value=float(p_f),
            equal_variance=equal_variance,
        )

        t_res = ttest_ind(a, b, equal_var=equal_variance)
        _check_finite(label, "t-test", t_res.statistic, t_res.pvalue)
        t_test = TTestResult(
            statistic=float(t_res.statistic),
            df=float(t_res.df),
            p_value=float(t_res.pvalue),
            equal_variance=equal_variance,
        )

        logger.debug(
            f"{label}: parametric branch, F p={p_f:.4f}, t={t_test.statistic:.4f}, "
            f"p={t_test.p_value:.4g}"
        )
        return ParametricResult(
            label=label,
            normality_a=normality_a,
            normality_b=normality_b,
            variance_test=variance_test,
            t_test=t_test,
        )

    method = _rank_sum_method(a, b)
    u_stat, p_value = mannwhitneyu(
        a, b, alternative="two-sided", use_continuity=True, method=method
    )
    _check_finite(label, "Wilcoxon rank-sum test", u_stat, p_value)

    logger.debug(
        f"{label}: non-parametric branch ({method}), U={u_stat:.1f}, p={p_value:.4g}"
    )
    return NonParametricResult(
        label=label,
        normality_a=normality_a,
        normality_b=normality_b,
        rank_sum=RankSumResult(statistic=float(u_stat), p_value=float(p_value)),
    )
