"""
Ad platform layer.

The engine consumes platforms through the PlatformClient contract only.
Funnel definitions per (platform, vertical) live in funnels.py and are
resolved through PlatformRegistry (registry.py).
"""

from funnelscope.platforms.base import PlatformClient
from funnelscope.platforms.static import StaticPlatformClient

PLATFORMS = ("meta", "google", "tiktok")

__all__ = ["PLATFORMS", "PlatformClient", "StaticPlatformClient"]
