"""Pytest configuration for funnelscope tests

WHAT: Shared fixtures (comparison periods, funnels, in-memory clients)
WHY: Keeps every test on the same fixed calendar so maturity and
     seasonality never depend on the day the suite runs
REFERENCES:
    - tests/factories.py: snapshot and result builders
    - funnelscope/platforms/static.py: StaticPlatformClient
"""

import pytest

from funnelscope.config import get_settings
from funnelscope.platforms.funnels import META_COMMERCE_FUNNEL
from funnelscope.platforms.static import StaticPlatformClient
from funnelscope.verticals.benchmarks import COMMERCE_BENCHMARKS
from tests.factories import CURRENT, PERIODS, PREVIOUS, commerce_snapshot


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def periods():
    return PERIODS


@pytest.fixture
def commerce_funnel():
    return META_COMMERCE_FUNNEL


@pytest.fixture
def commerce_benchmarks():
    return COMMERCE_BENCHMARKS


@pytest.fixture
def stable_meta_client():
    """Meta client whose two periods are identical."""
    return StaticPlatformClient("meta", {
        CURRENT: commerce_snapshot(CURRENT),
        PREVIOUS: commerce_snapshot(PREVIOUS),
    })
