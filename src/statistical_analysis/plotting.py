import logging

import matplotlib.pyplot as plt
import numpy as np

from src.data_loading.loader import TIME_CATEGORIES, TIME_CATEGORY_COLUMN, TIME_SECONDS_COLUMN
from src.data_loading.schema import DAY_COLUMN

logger = logging.getLogger(__name__)

# Visible time-of-day window for the min/max line plot (07:30 to 16:30)
TIME_AXIS_LIMITS = (7.5 * 3600, 16.5 * 3600)
TIME_AXIS_TICKS = [8 * 3600, 12 * 3600, 16 * 3600]


def _finish(fig, save_path):
    """Save the figure to ``save_path`` or show it interactively."""
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        logger.info(f"Plot saved to {save_path}")
    else:
        plt.show()


def _format_clock(seconds):
    hours, rest = divmod(int(seconds), 3600)
    return f"{hours:02d}:{rest // 60:02d}"


def plot_variable_by_time_category(df, value_col, y_label, title, save_path: str = None):
    """
    Boxplot of one variable per time-of-day category.

    Parameters
    ----------
    df : pd.DataFrame
        Prepared measurements with a "Time category" column.
    value_col : str
        Column to plot.
    y_label : str
        Label of the y-axis.
    title : str
        Plot title.
    save_path : str, optional
        Path to save the plot (format from the suffix, e.g. ".pdf"). If None,
        displays the plot interactively.

    Raises
    ------
    RuntimeError
        If there are no values to plot.
    """
    groups = []
    labels = []
    for category in TIME_CATEGORIES:
        values = df.loc[df[TIME_CATEGORY_COLUMN] == category, value_col].dropna().to_numpy()
        if len(values) > 0:
            groups.append(values)
            labels.append(category)

    if not groups:
        raise RuntimeError(f"No values of '{value_col}' to plot")

    fig, ax = plt.subplots(figsize=(6, 5))
    boxes = ax.boxplot(groups, patch_artist=True)
    for patch in boxes["boxes"]:
        patch.set_facecolor("skyblue")
        patch.set_alpha(0.7)

    ax.set_xticks(range(1, len(labels) + 1))
    ax.set_xticklabels(labels)
    ax.set_xlabel("Time of Day")
    ax.set_ylabel(y_label)
    ax.set_title(title)
    ax.grid(True, axis="y", alpha=0.3)

    _finish(fig, save_path)


def plot_min_max_by_day(df, max_col, min_col, y_label, title, save_path: str = None):
    """
    Line plot of maximum (solid) and minimum (dashed) readings over the day.

    One colour per day; the x-axis shows clock time between 07:30 and 16:30.

    Raises
    ------
    RuntimeError
        If there are no readings to plot.
    """
    data = df.dropna(subset=[TIME_SECONDS_COLUMN]).sort_values(TIME_SECONDS_COLUMN)
    if data[[max_col, min_col]].dropna(how="all").empty:
        raise RuntimeError(f"No values of '{max_col}' or '{min_col}' to plot")

    fig, ax = plt.subplots(figsize=(7, 5))
    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]

    for i, (day, day_df) in enumerate(data.groupby(DAY_COLUMN, observed=True)):
        color = colors[i % len(colors)]
        ax.plot(day_df[TIME_SECONDS_COLUMN], day_df[max_col], "-o", color=color, label=str(day))
        ax.plot(
            day_df[TIME_SECONDS_COLUMN],
            day_df[min_col],
            "--o",
            color=color,
            markerfacecolor="none",
        )

    ax.set_xlim(*TIME_AXIS_LIMITS)
    ax.set_xticks(TIME_AXIS_TICKS)
    ax.set_xticklabels([_format_clock(t) for t in TIME_AXIS_TICKS])
    ax.set_xlabel("Time of Day")
    ax.set_ylabel(y_label)
    ax.set_title(title)
    ax.legend(title="Day")

    _finish(fig, save_path)


def plot_correlation(df, x_col, y_col, save_path: str = None):
    """
    Scatter plot of two variables with a least-squares line.

    Raises
    ------
    RuntimeError
        If fewer than two complete pairs are available.
    """
    pairs = df[[x_col, y_col]].astype(float).dropna()
    if len(pairs) < 2:
        raise RuntimeError(f"Not enough complete pairs of '{x_col}' and '{y_col}' to plot")

    x = pairs[x_col].to_numpy()
    y = pairs[y_col].to_numpy()

    fig, ax = plt.subplots(figsize=(6, 5))
    ax.scatter(x, y, alpha=0.7, edgecolor="black")

    title = f"{y_col} vs {x_col}"
    if np.ptp(x) > 0 and np.ptp(y) > 0:
        slope, intercept = np.polyfit(x, y, 1)
        xs = np.linspace(x.min(), x.max(), 100)
        ax.plot(xs, slope * xs + intercept, "r-", linewidth=2, label="Least squares fit")
        ax.legend()
        r = np.corrcoef(x, y)[0, 1]
        title += f" (r = {r:.2f})"

    ax.set_xlabel(x_col)
    ax.set_ylabel(y_col)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path)
