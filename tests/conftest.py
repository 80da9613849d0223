"""
Shared fixtures for the collector test suite.
"""

import pytest

from fakes import CapturingDelivery, FakeClock, RecordingSleep


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def delivery():
    return CapturingDelivery()
