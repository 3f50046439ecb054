"""
funnelscope - advertising funnel diagnostics.

Compares two periods of ad-platform metrics along a funnel, explains what
changed and where the money went, and correlates the results across
Meta, Google and TikTok.
"""

from funnelscope.exceptions import (
    ConfigurationError,
    FunnelscopeError,
    InvalidInputError,
    InvalidTimeRangeError,
    PlatformFetchError,
    UnknownFunnelError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "FunnelscopeError",
    "InvalidInputError",
    "InvalidTimeRangeError",
    "PlatformFetchError",
    "UnknownFunnelError",
]
