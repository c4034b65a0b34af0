"""Audit package

Modules:
- base: the AuditRunner interface and the requested Lighthouse categories.
- lighthouse: runner backed by the local Lighthouse CLI (headless Chrome per call).
- psi: runner backed by the PageSpeed Insights API.
- fake: canned/deterministic runner for tests and offline demos.
- normalizer: raw Lighthouse result -> persisted report fields.
"""
from .base import CATEGORIES, AuditRunner, RawAuditResult
from .fake import FakeAuditRunner
from .lighthouse import LighthouseRunner
from .normalizer import DEFAULT_METRIC_MAPPING, MetricMapping, ReportData, normalize
from .psi import PageSpeedRunner

__all__ = [
    "CATEGORIES",
    "AuditRunner",
    "RawAuditResult",
    "FakeAuditRunner",
    "LighthouseRunner",
    "PageSpeedRunner",
    "MetricMapping",
    "DEFAULT_METRIC_MAPPING",
    "ReportData",
    "normalize",
    "build_runner",
    "metric_mapping",
]


def build_runner(settings) -> AuditRunner:
    """Pick the runner named by settings.AUDIT_RUNNER."""
    if settings.AUDIT_RUNNER == "psi":
        return PageSpeedRunner(
            api_key=settings.PSI_API_KEY,
            strategy=settings.PSI_STRATEGY,
            request_timeout=settings.AUDIT_TIMEOUT,
        )
    if settings.AUDIT_RUNNER == "fake":
        return FakeAuditRunner()
    return LighthouseRunner(binary=settings.LIGHTHOUSE_BIN, chrome_flags=settings.CHROME_FLAGS)


def metric_mapping(settings) -> MetricMapping:
    return MetricMapping(
        load_time=settings.LOAD_TIME_AUDIT,
        resource_size=settings.RESOURCE_SIZE_AUDIT,
        request_count=settings.REQUEST_COUNT_AUDIT,
    )
