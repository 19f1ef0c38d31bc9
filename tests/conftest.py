"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os

import pytest

from tests.test_fixtures.cache_factory import CacheTestFactory, FakeClock, FakeRemoteCache

# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


# ============================================================================
# Cache Fixtures
# ============================================================================


@pytest.fixture
def clock():
    """Manually advanced clock shared by the fake remote and the local store."""
    return FakeClock()


@pytest.fixture
def fake_remote(clock):
    """In-memory remote cache with failure injection."""
    return FakeRemoteCache(clock)


@pytest.fixture
async def cache_manager(fake_remote, clock):
    """CacheManager wired to the fake remote, already initialized (connected)."""
    manager = CacheTestFactory.cache_manager(fake_remote, clock)
    await manager.initialize()
    yield manager
    await manager.shutdown()


@pytest.fixture
async def local_only_cache(clock):
    """CacheManager without a remote backend (unconfigured)."""
    manager = CacheTestFactory.cache_manager(None, clock)
    await manager.initialize()
    yield manager
    await manager.shutdown()


@pytest.fixture(autouse=True)
def _reset_request_id():
    """Keep the logging request ID from leaking between tests."""
    from insights_cache.core.logging.logger import clear_request_id

    yield
    clear_request_id()
