"""Error taxonomy for scan units."""

from __future__ import annotations


class RiskScanError(Exception):
    """Base class for all riskscan failures."""


class ConfigurationError(RiskScanError):
    """No usable analyzer configuration (most often a missing API key)."""


class TransportError(RiskScanError):
    """The remote analyzer could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(RiskScanError):
    """Analyzer text is not a ``{"findings": [...]}`` envelope."""


class FileAccessError(RiskScanError):
    """A source file or manifest could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
