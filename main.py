import argparse
import logging
import pathlib
import sys
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()

from src.data_loading import (
    combine_locations,
    load_measurements,
    location_samples,
)
from src.data_loading.config import HOLDING_SHEET_PATH, LAB_SHEET_PATH, OUTPUT_DIR
from src.data_loading.loader import (
    HOLDING,
    LABORATORY,
    RH_MEAN_COLUMN,
    TEMP_MEAN_COLUMN,
)
from src.data_loading.schema import RH_MAX_COLUMN, RH_MIN_COLUMN, TEMP_MAX_COLUMN, TEMP_MIN_COLUMN
from src.statistical_analysis.comparison import compare
from src.statistical_analysis.pipeline import (
    COMPARISON_VARIABLES,
    run_location_comparison,
    run_time_of_day_analysis,
)
from src.statistical_analysis.plotting import (
    plot_correlation,
    plot_min_max_by_day,
    plot_variable_by_time_category,
)
from src.statistical_analysis.report import (
    ReportCollector,
    format_comparison,
    generate_markdown_report,
)
from src.statistical_analysis.utils import summarize_measurements

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def configure_logging(log_level: str):
    """Configure logging with the specified level."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    return logging.getLogger(__name__)


def _plot_jobs(lab_df):
    """Plots of the laboratory sheet: (filename, caption, callable taking save_path)."""
    return [
        (
            "RH Range.pdf",
            "Relative Humidity Range per Measurement",
            lambda path: plot_variable_by_time_category(
                lab_df,
                RH_MEAN_COLUMN,
                "Mean Relative Humidity (%)",
                "Relative Humidity Range per Measurement",
                save_path=path,
            ),
        ),
        (
            "Temperature Range.pdf",
            "Temperature Range per Measurement",
            lambda path: plot_variable_by_time_category(
                lab_df,
                TEMP_MEAN_COLUMN,
                "Mean Temperature (°C)",
                "Temperature Range per Measurement",
                save_path=path,
            ),
        ),
        (
            "RH Min Max.pdf",
            "Relative Humidity Range per Measurement (%)",
            lambda path: plot_min_max_by_day(
                lab_df,
                RH_MAX_COLUMN,
                RH_MIN_COLUMN,
                "Relative Humidity (%)",
                "Relative Humidity Range per Measurement (%)",
                save_path=path,
            ),
        ),
        (
            "Temperature Min Max.pdf",
            "Temperature Range per Measurement (°C)",
            lambda path: plot_min_max_by_day(
                lab_df,
                TEMP_MAX_COLUMN,
                TEMP_MIN_COLUMN,
                "Temperature (°C)",
                "Temperature Range per Measurement (°C)",
                save_path=path,
            ),
        ),
        (
            "Correlation.pdf",
            "Mean temperature vs mean relative humidity",
            lambda path: plot_correlation(
                lab_df, TEMP_MEAN_COLUMN, RH_MEAN_COLUMN, save_path=path
            ),
        ),
    ]


def cmd_analyze(args):
    """Run the full analysis on the laboratory and holding sheets."""
    logger = configure_logging(args.log_level)

    output_dir = pathlib.Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    report_collector = ReportCollector() if args.report else None
    if args.report:
        if args.report is True:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            report_path = output_dir / f"analysis_report_{timestamp}.md"
        else:
            report_path = pathlib.Path(args.report)

    try:
        lab_df = load_measurements(args.lab, location=LABORATORY)
    except Exception as e:
        logger.error(f"Could not load laboratory sheet {args.lab}: {e}")
        return 1

    # Step 1-4: time-of-day analysis of the laboratory sheet
    logger.info("Running time-of-day analysis on laboratory data")
    try:
        output = run_time_of_day_analysis(
            lab_df,
            skip_anova=args.skip_anova,
            skip_correlation=args.skip_correlation,
        )
        print(output["summary"].to_string(float_format=lambda v: f"{v:.2f}"))
        if report_collector:
            report_collector.add_time_of_day_output(output)
    except Exception as e:
        logger.error(f"Time-of-day analysis failed: {e}")
        if report_collector:
            report_collector.add_error("time-of-day analysis", str(e))

    if args.no_plots:
        logger.info("Skipping plots.")
    else:
        for filename, caption, plot in _plot_jobs(lab_df):
            plot_path = output_dir / filename
            try:
                plot(str(plot_path))
                if report_collector:
                    report_collector.add_figure(plot_path, caption)
            except Exception as e:
                logger.error(f"Plotting '{caption}' failed: {e}")

    # Step 5: Holding vs Laboratory
    if args.skip_comparison:
        logger.info("Skipping location comparison.")
    else:
        try:
            holding_df = load_measurements(args.holding, location=HOLDING)
            combined = combine_locations(holding_df, lab_df)
            comparisons = run_location_comparison(combined)
            for result in comparisons.values():
                if not isinstance(result, dict):
                    print()
                    print(format_comparison(result))
            if report_collector:
                report_collector.add_comparison_output(comparisons)
        except Exception as e:
            logger.error(f"Location comparison failed: {e}")
            if report_collector:
                report_collector.add_error("location comparison", str(e))

    if report_collector:
        generate_markdown_report(report_collector, str(report_path))
        logger.info(f"Report generated: {report_path}")

    logger.info(f"All steps completed. Check {output_dir} for visualizations and results.")
    return 0


def cmd_compare(args):
    """Compare Holding and Laboratory readings and print the test reports."""
    logger = configure_logging(args.log_level)

    try:
        combined = combine_locations(
            load_measurements(args.holding, location=HOLDING),
            load_measurements(args.lab, location=LABORATORY),
        )
    except Exception as e:
        logger.error(f"Could not load measurement sheets: {e}")
        return 1

    status = 0
    for variable in args.variable or COMPARISON_VARIABLES:
        try:
            sample_a, sample_b = location_samples(combined, variable)
            result = compare(sample_a, sample_b, variable)
        except (ValueError, KeyError) as e:
            logger.error(f"Comparison for {variable} failed: {e}")
            status = 1
            continue
        print(format_comparison(result, group_a=HOLDING, group_b=LABORATORY))
        print()

    return status


def cmd_summary(args):
    """Print descriptive statistics of one measurement sheet."""
    logger = configure_logging(args.log_level)

    try:
        df = load_measurements(args.file)
    except Exception as e:
        logger.error(f"Could not load {args.file}: {e}")
        return 1

    summary = summarize_measurements(df)
    print(summary.to_string(float_format=lambda v: f"{v:.2f}"))
    return 0


def _add_log_level(parser):
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=LOG_LEVELS,
        help="Set logging level (default: INFO)",
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="HumTemp - Temperature and relative humidity analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze", help="Run the full analysis (summary, plots, ANOVA, correlation, comparison)"
    )
    analyze_parser.add_argument(
        "--lab",
        default=str(LAB_SHEET_PATH),
        help=f"Laboratory measurement sheet (default: {LAB_SHEET_PATH})",
    )
    analyze_parser.add_argument(
        "--holding",
        default=str(HOLDING_SHEET_PATH),
        help=f"Holding measurement sheet (default: {HOLDING_SHEET_PATH})",
    )
    analyze_parser.add_argument(
        "--output-dir",
        default=str(OUTPUT_DIR),
        help=f"Directory for plots and reports (default: {OUTPUT_DIR})",
    )
    analyze_parser.add_argument(
        "--skip-anova",
        action="store_true",
        help="Skip the repeated-measures ANOVA",
    )
    analyze_parser.add_argument(
        "--skip-correlation",
        action="store_true",
        help="Skip the correlation analysis",
    )
    analyze_parser.add_argument(
        "--skip-comparison",
        action="store_true",
        help="Skip the Holding vs Laboratory comparison",
    )
    analyze_parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Do not generate PDF plots",
    )
    analyze_parser.add_argument(
        "--report",
        nargs="?",
        const=True,
        default=False,
        metavar="PATH",
        help="Generate a Markdown report. Optionally specify output path (default: <output-dir>/analysis_report_<timestamp>.md)",
    )
    _add_log_level(analyze_parser)
    analyze_parser.set_defaults(func=cmd_analyze)

    # Compare command
    compare_parser = subparsers.add_parser(
        "compare", help="Compare Holding and Laboratory readings"
    )
    compare_parser.add_argument(
        "--lab",
        default=str(LAB_SHEET_PATH),
        help=f"Laboratory measurement sheet (default: {LAB_SHEET_PATH})",
    )
    compare_parser.add_argument(
        "--holding",
        default=str(HOLDING_SHEET_PATH),
        help=f"Holding measurement sheet (default: {HOLDING_SHEET_PATH})",
    )
    compare_parser.add_argument(
        "--variable",
        action="append",
        help=f"Variable to compare, may be repeated (default: {', '.join(COMPARISON_VARIABLES)})",
    )
    _add_log_level(compare_parser)
    compare_parser.set_defaults(func=cmd_compare)

    # Summary command
    summary_parser = subparsers.add_parser(
        "summary", help="Print descriptive statistics of a measurement sheet"
    )
    summary_parser.add_argument("--file", required=True, help="Measurement sheet (.xlsx, .xls or .csv)")
    _add_log_level(summary_parser)
    summary_parser.set_defaults(func=cmd_summary)

    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
