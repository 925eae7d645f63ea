"""Test fixtures for the InsectiScan analysis core."""

from tests.fixtures.mocks import (
    FakeClock,
    MockGeocoder,
    MockTransport,
    ProgressRecorder,
    RecordingSleep,
)

__all__ = [
    "FakeClock",
    "MockGeocoder",
    "MockTransport",
    "ProgressRecorder",
    "RecordingSleep",
]
