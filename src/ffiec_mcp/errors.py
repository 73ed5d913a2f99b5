"""Exceptions that stop an operation outright.

Per-bank problems (malformed rows, failed identities, a bank without an
income statement) are never raised; they are collected on the ImportResult.
"""


class FFIECError(Exception):
    """Base class for ffiec_mcp errors."""


class MissingScheduleError(FFIECError):
    """One or more required schedule files are absent; nothing was written."""

    def __init__(self, missing: list[str], labels: dict[str, str] | None = None):
        self.missing = list(missing)
        labels = labels or {}
        names = ", ".join(labels.get(m, m) for m in self.missing)
        super().__init__(f"Missing required schedule files: {names}")


class StoreUnavailableError(FFIECError, RuntimeError):
    """No MongoDB connection is configured or reachable."""
