"""Shared fixtures for the billing tests."""

from datetime import datetime

import pytest

from gst_billing.audit import AuditLogger, InMemoryAuditSink
from gst_billing.config import get_settings


class SequenceRandom:
    """Stands in for random.Random: randrange() returns preset values in order."""

    def __init__(self, values):
        self._values = iter(values)
        self.calls = 0

    def randrange(self, stop):
        self.calls += 1
        value = next(self._values)
        assert 0 <= value < stop
        return value


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; every test starts from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sequence_rng():
    return SequenceRandom


@pytest.fixture
def october_2024():
    return datetime(2024, 10, 5, 11, 30)


@pytest.fixture
def audit_sink():
    return InMemoryAuditSink()


@pytest.fixture
def audit_logger(audit_sink):
    return AuditLogger(sink=audit_sink)
