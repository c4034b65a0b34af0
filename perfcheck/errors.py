# perfcheck/errors.py
from typing import Optional


class PerfCheckError(Exception):
    """Base error. `kind` is reported to clients alongside the message."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str, *, kind: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if kind:
            self.kind = kind

    def __str__(self) -> str:
        return self.message


class InvalidURLError(PerfCheckError):
    kind = "validation"


class AuditError(PerfCheckError):
    """The audit engine could not produce a result."""

    kind = "audit"


class AuditTimeoutError(AuditError):
    kind = "timeout"


class StoreError(PerfCheckError):
    """Persistence or retrieval failed."""

    kind = "store"
