"""Shared pytest fixtures for readlater tests.

Fixture summary
---------------
provider        : Empty ScriptedProvider (every URL succeeds).
sleeper         : RecordingSleep injected into scrape clients.
settings        : Settings built from the test environment.

No test talks to the real Firecrawl API: provider HTTP is mocked with respx
and the pipeline tests run against in-memory providers.
"""

from __future__ import annotations

import os

import pytest

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set env vars before any application module is imported so that Settings()
# never picks up a developer's real API key from the shell.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "FIRECRAWL_API_KEY": "fc-test-key",
    "FIRECRAWL_BASE_URL": "https://firecrawl.test",
    "LOG_LEVEL": "INFO",
}

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ[_key] = _default

# ---------------------------------------------------------------------------
# Application imports (after env bootstrap)
# ---------------------------------------------------------------------------

from readlater.config.settings import Settings, get_settings  # noqa: E402
from tests.factories.providers import RecordingSleep, ScriptedProvider  # noqa: E402

# Clear the lru_cache so Settings() re-reads from the patched environment.
get_settings.cache_clear()


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
