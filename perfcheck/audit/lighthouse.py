# perfcheck/audit/lighthouse.py
import asyncio
import contextlib
import json
import logging
import os
import signal
from typing import List, Optional, Sequence

from ..errors import AuditError
from .base import CATEGORIES, AuditRunner, RawAuditResult

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"


def _tail(data: Optional[bytes], limit: int = 500) -> str:
    text = (data or b"").decode("utf-8", errors="replace").strip()
    return text[-limit:]


def parse_report(output: bytes, url: str) -> RawAuditResult:
    """Decode the JSON printed by the Lighthouse CLI and reject failed runs."""
    try:
        lhr = json.loads(output)
    except (TypeError, ValueError) as e:
        raise AuditError(f"Lighthouse returned unreadable output for {url}: {e}") from e

    if not isinstance(lhr, dict):
        raise AuditError(f"Lighthouse returned an unexpected payload for {url}")

    runtime_error = lhr.get("runtimeError")
    if isinstance(runtime_error, dict) and runtime_error.get("code") not in (None, "", "NO_ERROR"):
        msg = runtime_error.get("message") or runtime_error["code"]
        raise AuditError(f"Lighthouse could not audit {url}: {msg}")

    return lhr


async def _teardown(proc: asyncio.subprocess.Process) -> None:
    """Kill the Lighthouse process group (Chrome included) and reap the child."""
    if _POSIX:
        with contextlib.suppress(ProcessLookupError, PermissionError):
            os.killpg(proc.pid, signal.SIGKILL)
    elif proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
    if proc.returncode is None:
        await proc.wait()


class LighthouseRunner(AuditRunner):
    """
    Runs the Lighthouse CLI once per audit.

    Each call starts its own process group; Lighthouse launches a fresh
    headless Chrome inside it. The group is killed before `run` returns,
    including when the awaiting task is cancelled by a timeout.
    """

    name = "lighthouse"

    def __init__(
        self,
        binary: str = "lighthouse",
        chrome_flags: str = "--headless",
        categories: Sequence[str] = CATEGORIES,
    ):
        self.binary = binary
        self.chrome_flags = chrome_flags
        self.categories = tuple(categories)

    def build_command(self, url: str) -> List[str]:
        cmd = [
            self.binary,
            url,
            "--output=json",
            "--output-path=stdout",
            "--quiet",
            f"--only-categories={','.join(self.categories)}",
        ]
        if self.chrome_flags:
            cmd.append(f"--chrome-flags={self.chrome_flags}")
        return cmd

    async def run(self, url: str) -> RawAuditResult:
        cmd = self.build_command(url)
        logger.info("[Lighthouse] Auditing %s", url)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except FileNotFoundError as e:
            raise AuditError(f"Lighthouse executable not found: {self.binary}") from e
        except OSError as e:
            raise AuditError(f"Could not launch Lighthouse: {e}") from e

        try:
            stdout, stderr = await proc.communicate()
        finally:
            await _teardown(proc)

        if proc.returncode != 0:
            detail = _tail(stderr) or f"exit code {proc.returncode}"
            logger.error("[Lighthouse] Run failed for %s: %s", url, detail)
            raise AuditError(f"Lighthouse failed for {url}: {detail}")

        return parse_report(stdout, url)
