"""
Report generation for the humidity and temperature analyses.

This module renders comparison results as plain text and collects the output
of the time-of-day and location analyses into a Markdown report.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from src.statistical_analysis.comparison import (
    NonParametricResult,
    ParametricResult,
)

logger = logging.getLogger(__name__)

SIGNIFICANCE_LEVEL = 0.05


def _fmt_p(p_value: float) -> str:
    return "< 0.0001" if p_value < 1e-4 else f"{p_value:.4f}"


def format_comparison(result, group_a: str = "Holding", group_b: str = "Laboratory") -> str:
    """
    Render a comparison result as a human-readable text block.

    Parameters
    ----------
    result : ParametricResult or NonParametricResult
        Output of ``compare``.
    group_a, group_b : str, optional
        Names of the two samples in the order they were compared.

    Returns
    -------
    str
        Label, both normality tests, the branch taken and the final test.
    """
    if not isinstance(result, (ParametricResult, NonParametricResult)):
        raise TypeError(f"Unknown comparison result type: {type(result).__name__}")

    lines = [f"===== Tests for {result.label} ====="]
    lines.append("Shapiro-Wilk normality test:")
    for name, norm in ((group_a, result.normality_a), (group_b, result.normality_b)):
        verdict = "normal" if norm.is_normal else "not normal"
        lines.append(f"  {name}: W = {norm.statistic:.4f}, p-value = {_fmt_p(norm.p_value)} ({verdict})")

    if isinstance(result, ParametricResult):
        ftest = result.variance_test
        ttest = result.t_test
        lines.append("Branch: parametric (both samples normal)")
        lines.append(
            f"F-test (equal variances): F = {ftest.statistic:.4f}, "
            f"num df = {ftest.df_num}, denom df = {ftest.df_denom}, "
            f"p-value = {_fmt_p(ftest.p_value)}"
        )
        kind = "Two sample t-test (pooled variance)" if ttest.equal_variance else "Welch t-test"
        lines.append(
            f"{kind}: t = {ttest.statistic:.4f}, df = {ttest.df:.2f}, "
            f"p-value = {_fmt_p(ttest.p_value)}"
        )
    else:
        lines.append("Branch: non-parametric (normality rejected)")
        lines.append(
            f"Wilcoxon rank-sum test (Mann-Whitney U): W = {result.rank_sum.statistic:.1f}, "
            f"p-value = {_fmt_p(result.rank_sum.p_value)}"
        )

    return "\n".join(lines)


@dataclass
class ReportCollector:
    """Collects analysis output and figures for report generation."""

    time_of_day_output: dict = field(default_factory=dict)
    comparison_output: dict = field(default_factory=dict)
    figures: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    def add_time_of_day_output(self, output: dict):
        """Add output from run_time_of_day_analysis()."""
        self.time_of_day_output.update(output)

    def add_comparison_output(self, output: dict):
        """Add output from run_location_comparison()."""
        self.comparison_output.update(output)

    def add_figure(self, path: str, caption: str):
        self.figures.append((str(path), caption))

    def add_error(self, stage: str, message: str):
        """Record a stage of the analysis that failed as a whole."""
        self.errors.append((stage, message))

    def _p_values(self) -> list:
        pvals = []
        for key, value in self.time_of_day_output.items():
            if key.startswith(("anova-", "correlation-")) and "p_value" in value:
                pvals.append(value["p_value"])
        for value in self.comparison_output.values():
            if isinstance(value, (ParametricResult, NonParametricResult)):
                pvals.append(value.p_value)
        return pvals

    def get_summary_stats(self) -> dict:
        """
        Calculate summary statistics across all tests.

        Returns
        -------
        dict
            Number of tests run, failed and significant at the 0.05 level.
        """
        pvals = self._p_values()
        failed = [
            v
            for v in [*self.time_of_day_output.values(), *self.comparison_output.values()]
            if isinstance(v, dict) and "error" in v
        ]
        significant = [p for p in pvals if p < SIGNIFICANCE_LEVEL]

        return {
            "total_tests": len(pvals),
            "failed_tests": len(failed),
            "significant_tests": len(significant),
            "significant_rate": len(significant) / len(pvals) if pvals else 0,
        }


def _status(p_value: float) -> str:
    return "Significant" if p_value < SIGNIFICANCE_LEVEL else "n.s."


def generate_markdown_report(collector: ReportCollector, output_path: str) -> str:
    """
    Generate a Markdown report from collected analysis results.

    Parameters
    ----------
    collector : ReportCollector
        Collector containing analysis results.
    output_path : str
        Path to save the Markdown report.

    Returns
    -------
    str
        Path to the generated report.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    stats = collector.get_summary_stats()
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    lines = []

    # Header
    lines.append("# Humidity and Temperature Analysis Report")
    lines.append("")
    lines.append(f"**Generated:** {timestamp}")
    lines.append("")

    # Summary section
    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Tests run:** {stats['total_tests']}")
    lines.append(f"- **Failed tests:** {stats['failed_tests']}")
    lines.append(
        f"- **Significant (p < 0.05):** {stats['significant_tests']} "
        f"({stats['significant_rate']:.1%})"
    )
    lines.append("")

    for stage, message in collector.errors:
        lines.append(f"**Error ({stage}):** {message}")
        lines.append("")

    # Descriptive statistics
    summary = collector.time_of_day_output.get("summary")
    if summary is not None:
        lines.append("## Descriptive Statistics")
        lines.append("")
        lines.append("| Variable | " + " | ".join(summary.columns) + " |")
        lines.append("|:---------|" + "|".join(":---" for _ in summary.columns) + "|")
        for variable, row in summary.iterrows():
            cells = [str(int(v)) if col == "NA's" else f"{v:.2f}" for col, v in row.items()]
            lines.append(f"| {variable} | " + " | ".join(cells) + " |")
        lines.append("")

    # ANOVA
    anova_keys = [k for k in collector.time_of_day_output if k.startswith("anova-")]
    if anova_keys:
        lines.append("## Repeated-Measures ANOVA (time of day within day)")
        lines.append("")
        lines.append("| Variable | F | df | p-value | Status |")
        lines.append("|:---------|:--|:---|:--------|:-------|")
        for key in anova_keys:
            variable = key[len("anova-") :]
            res = collector.time_of_day_output[key]
            if "error" in res:
                lines.append(f"| {variable} | - | - | - | Error: {res['error']} |")
                continue
            lines.append(
                f"| {variable} | {res['f_statistic']:.4f} | {res['df_effect']}, {res['df_error']} "
                f"| {_fmt_p(res['p_value'])} | {_status(res['p_value'])} |"
            )
        lines.append("")

    # Correlation
    corr_keys = [k for k in collector.time_of_day_output if k.startswith("correlation-")]
    if corr_keys:
        lines.append("## Correlation")
        lines.append("")
        for key in corr_keys:
            res = collector.time_of_day_output[key]
            pair = key[len("correlation-") :].replace("-", " vs ")
            if "error" in res:
                lines.append(f"- **{pair}:** Error: {res['error']}")
            else:
                lines.append(
                    f"- **{pair}:** Pearson r = {res['r']:.4f}, "
                    f"p-value = {_fmt_p(res['p_value'])}, n = {res['n']}"
                )
        lines.append("")

    # Location comparison
    if collector.comparison_output:
        lines.append("## Location Comparison (Holding vs Laboratory)")
        lines.append("")
        lines.append(
            "| Variable | Shapiro p (Holding) | Shapiro p (Laboratory) | Test | Statistic "
            "| p-value | Status |"
        )
        lines.append("|:---------|:----|:----|:-----|:----|:--------|:-------|")
        for key, res in collector.comparison_output.items():
            variable = key[len("comparison-") :]
            if isinstance(res, dict):
                lines.append(f"| {variable} | - | - | - | - | - | Error: {res.get('error')} |")
                continue
            if isinstance(res, ParametricResult):
                test = "t-test" if res.t_test.equal_variance else "Welch t-test"
                statistic = f"t = {res.t_test.statistic:.4f}"
            else:
                test = "Wilcoxon rank-sum"
                statistic = f"W = {res.rank_sum.statistic:.1f}"
            lines.append(
                f"| {variable} | {_fmt_p(res.normality_a.p_value)} "
                f"| {_fmt_p(res.normality_b.p_value)} | {test} | {statistic} "
                f"| {_fmt_p(res.p_value)} | {_status(res.p_value)} |"
            )
        lines.append("")

        lines.append("### Details")
        lines.append("")
        for res in collector.comparison_output.values():
            if isinstance(res, (ParametricResult, NonParametricResult)):
                lines.append("```")
                lines.append(format_comparison(res))
                lines.append("```")
                lines.append("")

    # Figures
    if collector.figures:
        lines.append("## Figures")
        lines.append("")
        for path, caption in collector.figures:
            # Relative to the report location
            try:
                rel_path = Path(path).resolve().relative_to(output_path.parent.resolve())
            except ValueError:
                rel_path = Path(path)
            lines.append(f"- [{caption}]({rel_path.as_posix()})")
        lines.append("")

    # Write report
    report_content = "\n".join(lines)
    output_path.write_text(report_content, encoding="utf-8")

    logger.info(f"Report generated: {output_path}")
    return str(output_path)
