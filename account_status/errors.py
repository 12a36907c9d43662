"""Errors raised by the enrichment pipeline."""
from enum import Enum
from typing import Any, List, Optional


class AccountStatusError(Exception):
    """Base error for this package."""


class ParseError(AccountStatusError):
    """The input table is unreadable or structurally broken."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class LookupErrorKind(str, Enum):
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    BAD_STATUS = "bad_status"
    BAD_PAYLOAD = "bad_payload"


class StatusLookupError(AccountStatusError):
    """A single status lookup failed. Scoped to the key that issued it."""

    def __init__(self, kind: LookupErrorKind, key: Any, message: str):
        self.kind = kind
        self.key = key
        super().__init__(f"lookup for {key!r} failed ({kind.value}): {message}")


class CorrelationError(AccountStatusError):
    """One or more rows have no matching status record."""

    def __init__(self, keys: List[Any]):
        self.keys = list(keys)
        shown = ", ".join(repr(k) for k in self.keys[:10])
        super().__init__(f"no status record for key(s): {shown}")


class PipelineAborted(AccountStatusError):
    """A row-scoped failure escalated to a run failure by policy."""

    def __init__(self, message: str, errors: list):
        self.errors = errors
        super().__init__(message)
