"""Pytest configuration and shared fixtures"""
from typing import Any, Optional

import pytest

from transaction_time import Event, TransactionTimeFilter, TransactionTimeSettings

UID_FIELD = "uniqueIdField"
TIMEOUT = 30


def make_event(uid: Any = None, timestamp: Optional[str] = None, **fields) -> Event:
    """Build an event the way the host pipeline would hand it over"""
    data = {"message": "Log message"}
    if uid is not None:
        data[UID_FIELD] = uid
    if timestamp is not None:
        data["@timestamp"] = timestamp
    data.update(fields)
    return Event(data)


@pytest.fixture
def make_filter():
    """Factory for filters using the shared test defaults"""
    def _make_filter(**options) -> TransactionTimeFilter:
        config = {"uid_field": UID_FIELD, "timeout": TIMEOUT, "attach_event": "first"}
        config.update(options)
        return TransactionTimeFilter(TransactionTimeSettings(**config))
    return _make_filter


@pytest.fixture
def transaction_filter(make_filter):
    """Filter with attach_event=first so events are stored"""
    return make_filter()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep TRANSACTION_TIME_* variables of the host out of the tests"""
    import os

    for name in list(os.environ):
        if name.upper().startswith("TRANSACTION_TIME_"):
            monkeypatch.delenv(name, raising=False)


# Test configuration
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "concurrency: mark test as exercising multiple threads"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test items to add markers automatically"""
    for item in items:
        if "test_concurrency" in str(item.fspath):
            item.add_marker(pytest.mark.concurrency)
