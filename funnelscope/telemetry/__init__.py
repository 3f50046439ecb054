"""
Telemetry Module
================

Error tracking for the diagnostic engine. Logging itself uses the standard
library (one module-level logger per module).

Usage:
    from funnelscope.telemetry import init_sentry
    init_sentry()
"""

from funnelscope.telemetry.sentry import capture_exception, init_sentry

__all__ = ["capture_exception", "init_sentry"]
