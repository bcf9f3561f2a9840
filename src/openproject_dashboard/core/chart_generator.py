"""Matplotlib burndown and workload charts rendered to PNG bytes."""

from __future__ import annotations

import io
import logging
from datetime import date
from typing import Any

from openproject_dashboard.core.data_models import BurndownPoint, WorkloadBucket
from openproject_dashboard.core.dates import MONTHS_ABBR

import matplotlib  # isort: skip

matplotlib.use("Agg")

import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import matplotlib.ticker as mticker  # noqa: E402

logger = logging.getLogger(__name__)


class _EnglishDateFormatter(mticker.Formatter):
    """Date formatter that always uses English abbreviated month names.

    Avoids locale-dependent ``%b``, which may yield characters matplotlib's
    default font cannot render.
    """

    def __call__(self, x: float, pos: int | None = None) -> str:
        dt = mdates.num2date(x)
        return f"{dt.day:02d} {MONTHS_ABBR[dt.month - 1]}"

# -- Light theme colour palette ------------------------------------------------
_LIGHT = {
    "ideal": "#888888",
    "actual": "#004099",
    "total": "#004099",
    "pending": "#ffa500",
    "delayed": "#f44336",
    "weekend": "#f4f5f7",
    "label_color": "#505f79",
    "grid": "#dfe1e6",
    "bg": "#ffffff",
    "face": "#ffffff",
    "legend_face": "#ffffff",
}

# -- Dark theme colour palette -------------------------------------------------
_DARK = {
    "ideal": "#90a4ae",
    "actual": "#82b1ff",
    "total": "#2979ff",
    "pending": "#ffb74d",
    "delayed": "#ef5350",
    "weekend": "#263238",
    "label_color": "#b0bec5",
    "grid": "#37474f",
    "bg": "#1e1e1e",
    "face": "#1e1e1e",
    "legend_face": "#263238",
}


def generate_burndown_chart(
    points: list[BurndownPoint], *, dpi: int = 150, dark: bool = False
) -> bytes | None:
    """Render ideal vs. actual remaining story points as PNG bytes.

    Returns ``None`` if there are no points to plot.
    """
    if not points:
        logger.debug("No burndown data — skipping chart")
        return None

    logger.debug("Rendering burndown: %d points, dark=%s, dpi=%d", len(points), dark, dpi)
    pal = _DARK if dark else _LIGHT

    fig, ax = plt.subplots(figsize=(7.2, 3.6), dpi=dpi)
    fig.patch.set_facecolor(pal["face"])
    ax.set_facecolor(pal["bg"])

    days = [p.day for p in points]
    _draw_weekend_bands(ax, days, pal["weekend"])

    ax.plot(
        days, [p.ideal for p in points],
        color=pal["ideal"], linewidth=1.2, linestyle="--", label="Ideal",
    )
    ax.plot(
        days, [p.actual for p in points],
        color=pal["actual"], linewidth=1.8, marker="o", markersize=2.5, label="Actual",
    )

    ax.set_ylabel("Remaining story points", fontsize=8, color=pal["label_color"])
    ax.xaxis.set_major_formatter(_EnglishDateFormatter())
    ax.xaxis.set_major_locator(mdates.AutoDateLocator(minticks=4, maxticks=10))
    fig.autofmt_xdate(rotation=30, ha="right")
    if len(days) > 1:
        ax.set_xlim(days[0], days[-1])
    ax.set_ylim(bottom=0)

    _style_axes(ax, pal)
    _add_legend(ax, pal, loc="upper right")
    return _to_png(fig, dpi)


def generate_workload_chart(
    buckets: list[WorkloadBucket], *, dpi: int = 150, dark: bool = False
) -> bytes | None:
    """Render total/pending/delayed task counts per assignee as PNG bytes.

    Returns ``None`` if there are no buckets.
    """
    if not buckets:
        logger.debug("No workload data — skipping chart")
        return None

    logger.debug("Rendering workload: %d assignees, dark=%s, dpi=%d", len(buckets), dark, dpi)
    pal = _DARK if dark else _LIGHT
    ordered = sorted(buckets, key=lambda b: b.total_tasks, reverse=True)

    fig, ax = plt.subplots(figsize=(7.2, 3.6), dpi=dpi)
    fig.patch.set_facecolor(pal["face"])
    ax.set_facecolor(pal["bg"])

    width = 0.27
    xs = list(range(len(ordered)))
    series = (
        ("Total tasks", [b.total_tasks for b in ordered], pal["total"]),
        ("Pending tasks", [b.pending_tasks for b in ordered], pal["pending"]),
        ("Delayed tasks", [b.delayed_tasks for b in ordered], pal["delayed"]),
    )
    for offset, (label, values, colour) in zip((-width, 0.0, width), series):
        ax.bar([x + offset for x in xs], values, width=width, color=colour, label=label)

    ax.set_xticks(xs)
    ax.set_xticklabels([b.name for b in ordered], rotation=45, ha="right")
    ax.set_ylabel("Number of tasks", fontsize=8, color=pal["label_color"])
    ax.yaxis.set_major_locator(mticker.MaxNLocator(integer=True))
    ax.set_ylim(bottom=0)

    _style_axes(ax, pal)
    _add_legend(ax, pal, loc="upper right")
    return _to_png(fig, dpi)


# -- helpers ------------------------------------------------------------------


def _style_axes(ax: plt.Axes, pal: dict[str, str]) -> None:
    ax.tick_params(labelsize=7, colors=pal["label_color"])
    for spine in ax.spines.values():
        spine.set_color(pal["grid"])
    ax.grid(axis="y", linewidth=0.3, color=pal["grid"])
    ax.set_axisbelow(True)


def _add_legend(ax: plt.Axes, pal: dict[str, str], *, loc: str) -> None:
    legend = ax.legend(fontsize=6, loc=loc, framealpha=0.9, facecolor=pal["legend_face"])
    for text in legend.get_texts():
        text.set_color(pal["label_color"])


def _to_png(fig: Any, dpi: int) -> bytes:
    fig.tight_layout()
    buf = io.BytesIO()
    fig.savefig(
        buf, format="png", dpi=dpi, bbox_inches="tight",
        facecolor=fig.get_facecolor(), edgecolor="none",
    )
    plt.close(fig)
    buf.seek(0)
    data = buf.read()
    logger.debug("Chart rendered: %d bytes", len(data))
    return data


def _draw_weekend_bands(ax: plt.Axes, days: list[date], color: str) -> None:
    """Draw light gray vertical bands for weekends."""
    if not days:
        return

    in_weekend = False
    start: date | None = None

    for d in days:
        if d.weekday() >= 5:  # Saturday=5, Sunday=6
            if not in_weekend:
                start = d
                in_weekend = True
        else:
            if in_weekend and start is not None:
                ax.axvspan(start, d, color=color, zorder=0)
                in_weekend = False

    # Close trailing weekend
    if in_weekend and start is not None:
        ax.axvspan(start, days[-1], color=color, zorder=0)
