# perfcheck/service.py
import asyncio
import logging
import time
from typing import Any, List
from urllib.parse import urlparse

from starlette.concurrency import run_in_threadpool

from .audit.base import AuditRunner
from .audit.normalizer import DEFAULT_METRIC_MAPPING, MetricMapping, normalize
from .errors import AuditError, AuditTimeoutError, InvalidURLError
from .models import Report
from .store import ReportStore

logger = logging.getLogger(__name__)


def validate_url(url: Any) -> str:
    """
    Accept anything URL-shaped: an http(s) URL with a host. A bare host
    gets https:// prepended. Reachability is not checked.
    """
    if not url or not isinstance(url, str) or len(url.strip()) < 4:
        raise InvalidURLError("Provide a valid URL")
    u = url.strip()
    if "://" not in u:
        u = f"https://{u}"

    try:
        parsed = urlparse(u)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidURLError(f"Not a valid http(s) URL: {url.strip()}") from e
    if parsed.scheme not in ("http", "https") or not hostname:
        raise InvalidURLError(f"Not a valid http(s) URL: {url.strip()}")
    if any(ch.isspace() for ch in u):
        raise InvalidURLError(f"Not a valid http(s) URL: {url.strip()}")
    return u


class ReportService:
    """
    Submit: validate -> audit (bounded by audit_timeout) -> normalize -> save.
    List: every stored report, newest first.

    Any failure aborts the chain before save, so no partial report exists.
    """

    def __init__(
        self,
        runner: AuditRunner,
        store: ReportStore,
        mapping: MetricMapping = DEFAULT_METRIC_MAPPING,
        audit_timeout: float = 120.0,
    ):
        self.runner = runner
        self.store = store
        self.mapping = mapping
        self.audit_timeout = audit_timeout

    async def _run_audit(self, url: str):
        try:
            return await asyncio.wait_for(self.runner.run(url), timeout=self.audit_timeout)
        except asyncio.TimeoutError as e:
            raise AuditTimeoutError(f"Audit of {url} timed out after {self.audit_timeout:g}s") from e
        except AuditError:
            raise
        except Exception as e:
            # Anything else escaping a runner is still an engine failure
            raise AuditError(f"Audit of {url} failed: {e}") from e

    async def submit(self, url: Any) -> Report:
        target = validate_url(url)

        started = time.monotonic()
        logger.info("Audit started: %s (runner=%s)", target, self.runner.name)
        raw = await self._run_audit(target)

        try:
            data = normalize(target, raw, self.mapping)
        except Exception as e:
            raise AuditError(f"Could not read audit result for {target}: {e}") from e

        report = await run_in_threadpool(self.store.save, data)
        logger.info(
            "Audit finished: %s in %.1fs (report id=%s, performance=%.1f)",
            target, time.monotonic() - started, report.id, report.performance,
        )
        return report

    async def list_reports(self) -> List[Report]:
        return await run_in_threadpool(self.store.list_all)
