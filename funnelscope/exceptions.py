"""
Diagnostic Engine Exceptions
============================

Custom exception types for funnel diagnostics.

WHY THIS FILE EXISTS
--------------------
The engine distinguishes three failure families:
- Input validation (malformed time range, bad period length) - rejected
  before any fetch is issued
- Registry misses (no funnel/benchmarks for a source + vertical pair)
- Upstream fetch failures raised by platform clients

Data-maturity problems are NOT errors; they are reported on the result.

RELATED FILES
-------------
- funnelscope/models.py: TimeRange raises InvalidTimeRangeError
- funnelscope/platforms/registry.py: raises UnknownFunnelError
- funnelscope/orchestrator/runner.py: converts per-source failures to records
"""

from typing import Optional


class FunnelscopeError(Exception):
    """
    Base exception for all diagnostic engine errors.

    USAGE:
        try:
            result = await run_funnel_diagnostic(...)
        except FunnelscopeError as e:
            return {"error": e.to_user_message()}
    """

    def __init__(self, message: str, platform: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.platform = platform

    def to_user_message(self) -> str:
        return self.message


class InvalidInputError(FunnelscopeError):
    """Structurally invalid input; never retried."""


class InvalidTimeRangeError(InvalidInputError):
    """Raised when since > until or a period length is not positive."""

    def to_user_message(self) -> str:
        return f"Invalid reporting period: {self.message}"


class UnknownFunnelError(FunnelscopeError):
    """
    No funnel schema or benchmarks registered for a (platform, vertical) pair.

    ATTRIBUTES:
        platform: Source that was requested
        vertical: Vertical that was requested
    """

    def __init__(self, platform: str, vertical: str, message: Optional[str] = None):
        self.vertical = vertical
        if message is None:
            message = f'No funnel schema for platform "{platform}" + vertical "{vertical}"'
        super().__init__(message, platform)

    def to_user_message(self) -> str:
        return (
            f"{self.platform.title()} does not support the {self.vertical} funnel yet. "
            "Pick a supported vertical or remove this platform from the account config."
        )


class ConfigurationError(FunnelscopeError):
    """Account configuration could not be loaded or resolved."""


class PlatformFetchError(FunnelscopeError):
    """
    Upstream fetch failure raised by a platform client.

    The orchestrator records these per source; they never cross the
    orchestrator boundary.
    """

    def __init__(self, platform: str, message: str, retryable: bool = False):
        super().__init__(message, platform)
        self.retryable = retryable

    def to_user_message(self) -> str:
        return f"Could not fetch {self.platform.title()} data: {self.message}"
