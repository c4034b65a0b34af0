# perfcheck/charts.py
from __future__ import annotations

from datetime import timezone
from io import BytesIO
from typing import Any, Sequence

import matplotlib
matplotlib.use("Agg")  # headless
import matplotlib.dates as mdates
from matplotlib.figure import Figure

from .dashboard import MetricOption


def render_history_png(reports: Sequence[Any], metric: MetricOption) -> bytes:
    """
    Line chart of one category score over time, oldest to newest.
    `reports` is in List order (newest first). Returns PNG bytes.
    """
    ordered = list(reversed(reports))
    xs = [r.timestamp.replace(tzinfo=timezone.utc) if r.timestamp.tzinfo is None else r.timestamp for r in ordered]
    ys = [float(getattr(r, metric.attr) or 0.0) for r in ordered]

    # Figure without pyplot: rendered from worker threads
    fig = Figure(figsize=(10, 4), layout="constrained")
    ax = fig.subplots()
    if xs:
        ax.plot(xs, ys, color=metric.color, linewidth=2, marker="o", markersize=3)
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y-%m-%d"))
        fig.autofmt_xdate()
    else:
        ax.text(0.5, 0.5, "No reports yet", ha="center", va="center", transform=ax.transAxes, color="#94a3b8")
    ax.set_ylim(0, 100)
    ax.set_ylabel("Score")
    ax.set_title(f"{metric.label} History", fontsize=12)
    ax.grid(linestyle=":", alpha=0.4)

    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=120)
    return buf.getvalue()
