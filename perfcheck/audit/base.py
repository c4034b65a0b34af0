# perfcheck/audit/base.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

# A Lighthouse result object (LHR): {"categories": {...}, "audits": {...}, ...}
RawAuditResult = Dict[str, Any]

# Category ids requested from the engine, in display order.
CATEGORIES: Tuple[str, ...] = ("performance", "accessibility", "best-practices", "seo")


class AuditRunner(ABC):
    """Runs one audit of one URL. Implementations must not share browsers between calls."""

    name = "runner"

    @abstractmethod
    async def run(self, url: str) -> RawAuditResult:
        """Return the raw Lighthouse result for `url` or raise AuditError."""
