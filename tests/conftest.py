"""
Test configuration and fixtures for the InsectiScan analysis core.

Provides:
- Settings with fast, deterministic retry and cache values
- Solid-colour test images generated with Pillow
- An httpx MockTransport-backed RetryingTransport factory
- An AnalysisOrchestrator wired to mock collaborators
"""

import io
from datetime import datetime

import httpx
import pytest
from PIL import Image

from insectiscan.config import Settings
from insectiscan.services.analysis_service import AnalysisOrchestrator
from insectiscan.services.analytics_service import AnalyticsService
from insectiscan.services.connectivity import ConnectivityMonitor
from insectiscan.services.prompt_builder import PromptBuilder
from insectiscan.services.response_cache import ResponseCache
from insectiscan.services.transport import RetryingTransport
from tests.fixtures.mocks import (
    TEST_ENDPOINT,
    FakeClock,
    MockTransport,
    RecordingSleep,
)


# =============================================================================
# Settings & Clocks
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        openai_api_key="test-key",
        openai_base_url="https://api.test/v1",
        retry_base_delay=1.0,
        geocode_timeout=0.05,
        max_image_bytes=1024 * 1024,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fixed_now() -> datetime:
    """A July morning: Summer / Morning."""
    return datetime(2024, 7, 15, 9, 30)


# =============================================================================
# Images
# =============================================================================


def make_image(color, size=(32, 32), fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def red_image() -> bytes:
    return make_image((220, 40, 40))


@pytest.fixture
def skin_image() -> bytes:
    return make_image((230, 200, 180))


@pytest.fixture
def green_image() -> bytes:
    return make_image((40, 160, 60))


# =============================================================================
# Transport & Orchestrator
# =============================================================================


@pytest.fixture
def make_transport(recording_sleep):
    """
    Build a RetryingTransport whose HTTP calls are answered by `handler`.

    The handler receives the httpx.Request and returns an httpx.Response
    (or raises an httpx exception).
    """

    def _make(handler) -> RetryingTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return RetryingTransport(
            client=client,
            api_key="test-key",
            endpoint=TEST_ENDPOINT,
            base_delay=1.0,
            sleep=recording_sleep,
        )

    return _make


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def connectivity() -> ConnectivityMonitor:
    return ConnectivityMonitor(connected=True)


@pytest.fixture
def orchestrator(mock_transport, connectivity, fake_clock, fixed_now, test_settings):
    return AnalysisOrchestrator(
        transport=mock_transport,
        cache=ResponseCache(ttl_seconds=86400, clock=fake_clock),
        prompt_builder=PromptBuilder(clock=lambda: fixed_now),
        connectivity=connectivity,
        analytics=AnalyticsService(),
        settings=test_settings,
    )
