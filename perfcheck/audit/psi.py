# perfcheck/audit/psi.py
import asyncio
import logging
from typing import List, Sequence, Tuple

import aiohttp
from aiohttp import ClientTimeout
from aiohttp.client_exceptions import ClientError

from ..errors import AuditError, AuditTimeoutError
from .base import CATEGORIES, AuditRunner, RawAuditResult

PAGESPEED_API = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

logger = logging.getLogger(__name__)


class PageSpeedRunner(AuditRunner):
    """
    Runs Lighthouse remotely through the PageSpeed Insights v5 API.

    One request per audit, no retries; the caller bounds the total time.
    """

    name = "psi"

    def __init__(
        self,
        api_key: str = "",
        strategy: str = "desktop",
        categories: Sequence[str] = CATEGORIES,
        request_timeout: float = 120.0,
        endpoint: str = PAGESPEED_API,
    ):
        self.api_key = api_key
        self.strategy = strategy
        self.categories = tuple(categories)
        self.request_timeout = request_timeout
        self.endpoint = endpoint

    def build_params(self, url: str) -> List[Tuple[str, str]]:
        params = [
            ("url", url),
            ("strategy", self.strategy),
        ] + [("category", c) for c in self.categories]

        if self.api_key:
            params.append(("key", self.api_key))
        return params

    async def run(self, url: str) -> RawAuditResult:
        timeout = ClientTimeout(total=self.request_timeout, sock_connect=min(10.0, self.request_timeout))
        logger.info("[PSI] Auditing %s (%s)", url, self.strategy)

        try:
            async with aiohttp.ClientSession(timeout=timeout, raise_for_status=False) as session:
                async with session.get(self.endpoint, params=self.build_params(url)) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        logger.error("[PSI] HTTP %s for %s. Body: %s", resp.status, url, text[:500])
                        raise AuditError(f"PageSpeed Insights returned HTTP {resp.status} for {url}")
                    data = await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.warning("[PSI] Timed out after %ss for %s", self.request_timeout, url)
            raise AuditTimeoutError(f"PageSpeed Insights timed out after {self.request_timeout:g}s for {url}") from e
        except (ClientError, ValueError) as e:
            logger.warning("[PSI] ClientError for %s: %s", url, e)
            raise AuditError(f"PageSpeed Insights request failed for {url}: {e}") from e

        lighthouse = data.get("lighthouseResult") if isinstance(data, dict) else None
        if not isinstance(lighthouse, dict):
            raise AuditError(f"PageSpeed Insights returned no Lighthouse result for {url}")
        return lighthouse
