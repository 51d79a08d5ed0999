"""Test configuration and fixtures for the claim lifecycle engine."""

from collections.abc import Generator

import pytest

from siniestro_core.core.config import Settings, clear_settings_cache
from siniestro_core.services.claim_engine import ClaimLifecycleEngine


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Isolate each test from cached settings."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Default deadline configuration in UTC."""
    return Settings()


@pytest.fixture
def santiago_settings() -> Settings:
    """Deadline configuration for a Chilean business calendar."""
    return Settings(business_timezone="America/Santiago")


@pytest.fixture
def engine(settings: Settings) -> ClaimLifecycleEngine:
    """Engine bound to default settings."""
    return ClaimLifecycleEngine(settings)
