# perfcheck/audit/fake.py
import asyncio
import hashlib
from typing import Dict, List, Mapping, Optional

from .base import AuditRunner, RawAuditResult

# Deterministic, offline-friendly results based on URL hash.


def build_lighthouse_result(
    performance: Optional[float] = None,
    accessibility: Optional[float] = None,
    best_practices: Optional[float] = None,
    seo: Optional[float] = None,
    total_blocking_time: Optional[float] = None,
    total_byte_weight: Optional[float] = None,
    request_count: Optional[int] = None,
) -> RawAuditResult:
    """
    Build a minimal Lighthouse result. Scores are in [0,1]; a None argument
    leaves the category unscored or the audit absent.
    """
    categories = {
        "performance": {"id": "performance", "score": performance},
        "accessibility": {"id": "accessibility", "score": accessibility},
        "best-practices": {"id": "best-practices", "score": best_practices},
        "seo": {"id": "seo", "score": seo},
    }
    audits: Dict[str, dict] = {}
    if total_blocking_time is not None:
        audits["total-blocking-time"] = {"id": "total-blocking-time", "numericValue": total_blocking_time}
    if total_byte_weight is not None:
        audits["total-byte-weight"] = {"id": "total-byte-weight", "numericValue": total_byte_weight}
    if request_count is not None:
        audits["network-requests"] = {
            "id": "network-requests",
            "details": {"type": "table", "items": [{"url": f"/r{i}"} for i in range(request_count)]},
        }
    return {"lighthouseVersion": "fake", "categories": categories, "audits": audits}


def _fraction(digest: bytes, offset: int) -> float:
    return int.from_bytes(digest[offset:offset + 2], "big") / 65535


def result_from_url(url: str) -> RawAuditResult:
    h = hashlib.sha256(url.encode("utf-8")).digest()
    return build_lighthouse_result(
        performance=round(_fraction(h, 0), 2),
        accessibility=round(_fraction(h, 2), 2),
        best_practices=round(_fraction(h, 4), 2),
        seo=round(_fraction(h, 6), 2),
        total_blocking_time=round(_fraction(h, 8) * 2000, 1),
        total_byte_weight=float(int(_fraction(h, 10) * 5 * 1024 * 1024)),
        request_count=int(_fraction(h, 12) * 120),
    )


class FakeAuditRunner(AuditRunner):
    """
    Audit runner that never starts a browser.

    Returns `results[url]` when given, otherwise a result derived from the
    URL hash. `error` is raised instead when set; `delay` simulates a slow
    engine. Every requested URL is appended to `calls`.
    """

    name = "fake"

    def __init__(
        self,
        results: Optional[Mapping[str, RawAuditResult]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.results = dict(results or {})
        self.error = error
        self.delay = delay
        self.calls: List[str] = []

    async def run(self, url: str) -> RawAuditResult:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if url in self.results:
            return self.results[url]
        return result_from_url(url)
