# perfcheck/dashboard.py
"""
View model for the dashboard page.

Everything shown on the page is computed here from the List result
(newest first): scorecards and metric tiles for the latest report and the
history series, oldest to newest, for the chart.
"""
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Dict, List, Optional, Sequence

GOOD_THRESHOLD = 90.0
NEEDS_IMPROVEMENT_THRESHOLD = 50.0

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class MetricOption:
    key: str        # wire name
    attr: str       # model attribute
    label: str
    color: str


METRICS = (
    MetricOption("performance", "performance", "Performance", "#8b5cf6"),
    MetricOption("accessibility", "accessibility", "Accessibility", "#06b6d4"),
    MetricOption("bestPractices", "best_practices", "Best Practices", "#3b82f6"),
    MetricOption("seo", "seo", "SEO", "#6366f1"),
)
METRICS_BY_KEY = {m.key: m for m in METRICS}
DEFAULT_METRIC = "performance"

# Tailwind classes per band
BAND_STYLES = {
    "good": {"text": "text-emerald-500", "bar": "from-emerald-400 to-teal-500"},
    "needs-improvement": {"text": "text-amber-500", "bar": "from-amber-400 to-orange-500"},
    "poor": {"text": "text-rose-500", "bar": "from-rose-400 to-red-500"},
}


def score_band(score: float) -> str:
    if score >= GOOD_THRESHOLD:
        return "good"
    if score >= NEEDS_IMPROVEMENT_THRESHOLD:
        return "needs-improvement"
    return "poor"


def format_score(score: float) -> str:
    return f"{score:.1f}%"


def format_load_time(ms: float) -> str:
    return f"{ms / 1000:.2f}s"


def format_resource_size(size: float) -> str:
    return f"{size / BYTES_PER_MB:.2f} MB"


def get_metric(key: str) -> Optional[MetricOption]:
    return METRICS_BY_KEY.get(key)


def scorecards(report: Any) -> List[Dict[str, Any]]:
    cards = []
    for m in METRICS:
        value = float(getattr(report, m.attr) or 0.0)
        band = score_band(value)
        cards.append({
            "key": m.key,
            "label": m.label,
            "value": value,
            "display": format_score(value),
            "band": band,
            "width": max(0.0, min(100.0, value)),
            "text_class": BAND_STYLES[band]["text"],
            "bar_class": BAND_STYLES[band]["bar"],
        })
    return cards


def metric_tiles(report: Any) -> List[Dict[str, Any]]:
    return [
        {"key": "loadTime", "label": "Load Time", "display": format_load_time(report.load_time or 0.0)},
        {"key": "resourceSize", "label": "Resource Size", "display": format_resource_size(report.resource_size or 0.0)},
        {"key": "requestCount", "label": "Request Count", "display": str(report.request_count or 0)},
    ]


def history_series(reports: Sequence[Any]) -> Dict[str, Any]:
    """Chart data for every metric, oldest first. `reports` is newest first."""
    ordered = list(reversed(reports))
    timestamps = []
    for r in ordered:
        ts = r.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        timestamps.append(ts.isoformat())
    return {
        "timestamps": timestamps,
        "urls": [r.url for r in ordered],
        "series": {m.key: [float(getattr(r, m.attr) or 0.0) for r in ordered] for m in METRICS},
    }


def build_dashboard(reports: Sequence[Any], active_metric: str = DEFAULT_METRIC) -> Dict[str, Any]:
    if active_metric not in METRICS_BY_KEY:
        active_metric = DEFAULT_METRIC

    if not reports:
        return {"empty": True, "latest": None, "history": None, "metrics": METRICS, "active_metric": active_metric}

    latest = reports[0]
    return {
        "empty": False,
        "latest": {
            "url": latest.url,
            "timestamp": latest.timestamp,
            "scorecards": scorecards(latest),
            "tiles": metric_tiles(latest),
        },
        "history": history_series(reports),
        "metrics": METRICS,
        "active_metric": active_metric,
        "colors": {m.key: m.color for m in METRICS},
        "labels": {m.key: m.label for m in METRICS},
    }
