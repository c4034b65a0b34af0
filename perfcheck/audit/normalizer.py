# perfcheck/audit/normalizer.py
"""
Maps a raw Lighthouse result onto the persisted report shape.

Category scores arrive in [0,1] and are stored as percentages; the three
page metrics are read from named audits whose identifiers are configurable.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .base import RawAuditResult


@dataclass(frozen=True)
class MetricMapping:
    load_time: str = "total-blocking-time"
    resource_size: str = "total-byte-weight"
    request_count: str = "network-requests"


DEFAULT_METRIC_MAPPING = MetricMapping()


@dataclass
class ReportData:
    url: str
    performance: float = 0.0
    accessibility: float = 0.0
    best_practices: float = 0.0
    seo: float = 0.0
    load_time: float = 0.0
    resource_size: float = 0.0
    request_count: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _number(v: Any) -> Optional[float]:
    # bool is an int subclass; a True score is not a score
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    if v != v:  # NaN
        return None
    return float(v)


def _category_score(categories: Dict[str, Any], key: str) -> float:
    """Lighthouse category score in [0,1] -> 0..100, clamped. Unscored -> 0."""
    cat = categories.get(key)
    if not isinstance(cat, dict):
        return 0.0
    score = _number(cat.get("score"))
    if score is None:
        return 0.0
    return max(0.0, min(100.0, score * 100.0))


def _audit(audits: Dict[str, Any], key: str) -> Dict[str, Any]:
    a = audits.get(key)
    return a if isinstance(a, dict) else {}


def _numeric_value(audits: Dict[str, Any], key: str) -> float:
    v = _number(_audit(audits, key).get("numericValue"))
    return max(0.0, v) if v is not None else 0.0


def _item_count(audits: Dict[str, Any], key: str) -> int:
    details = _audit(audits, key).get("details")
    if not isinstance(details, dict):
        return 0
    items = details.get("items")
    return len(items) if isinstance(items, list) else 0


def normalize(url: str, raw: RawAuditResult, mapping: MetricMapping = DEFAULT_METRIC_MAPPING) -> ReportData:
    categories = raw.get("categories") if isinstance(raw, dict) else None
    audits = raw.get("audits") if isinstance(raw, dict) else None
    categories = categories if isinstance(categories, dict) else {}
    audits = audits if isinstance(audits, dict) else {}

    return ReportData(
        url=url,
        performance=_category_score(categories, "performance"),
        accessibility=_category_score(categories, "accessibility"),
        best_practices=_category_score(categories, "best-practices"),
        seo=_category_score(categories, "seo"),
        load_time=_numeric_value(audits, mapping.load_time),
        resource_size=_numeric_value(audits, mapping.resource_size),
        request_count=_item_count(audits, mapping.request_count),
    )
