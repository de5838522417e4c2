import os
import sys
import requests
import time
import json

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from utils import (
    fetch_exchange_rate,
    format_btc,
    format_number,
    format_percentage,
    parse_formatted_number,
)


def _session_returning(payload):
    class MockResponse:
        def raise_for_status(self):
            pass

        def json(self):
            if isinstance(payload, Exception):
                raise payload
            return payload

    class MockSession:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            pass

        def get(self, *args, **kwargs):
            return MockResponse()

    return MockSession


def test_fetch_exchange_rate_exponential_backoff(monkeypatch):
    session_instances = []

    class MockSession:
        def __init__(self):
            session_instances.append(self)

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            pass

        def get(self, *args, **kwargs):
            raise requests.exceptions.RequestException("boom")

    monkeypatch.setattr(requests, "Session", MockSession)

    sleep_calls = []

    def mock_sleep(duration):
        sleep_calls.append(duration)

    monkeypatch.setattr(time, "sleep", mock_sleep)

    rate, warnings = fetch_exchange_rate(max_attempts=3, base_delay=2)

    assert rate == 100000
    assert len(warnings) == 4
    assert "fallback" in warnings[-1]
    assert sleep_calls == [2, 4]
    assert len(session_instances) == 1


@pytest.mark.parametrize(
    "payload",
    [json.JSONDecodeError("Expecting value", "", 0), {}, {"USD": 0}],
)
def test_fetch_exchange_rate_bad_payload_falls_back(monkeypatch, payload):
    monkeypatch.setattr(requests, "Session", _session_returning(payload))

    rate, warnings = fetch_exchange_rate(max_attempts=1, fallback_rate=90_000)

    assert rate == 90_000
    assert len(warnings) == 2


def test_fetch_exchange_rate_success(monkeypatch):
    monkeypatch.setattr(
        requests, "Session", _session_returning({"USD": 12345.67, "EUR": 11000})
    )

    assert fetch_exchange_rate(max_attempts=1) == (12345.67, [])
    assert fetch_exchange_rate(currency="EUR", max_attempts=1) == (11000, [])


def test_fetch_exchange_rate_quick_fail(monkeypatch):
    request_calls = []

    class MockSession:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            pass

        def get(self, *args, **kwargs):
            request_calls.append(1)
            raise requests.exceptions.RequestException("boom")

    monkeypatch.setattr(requests, "Session", MockSession)

    sleep_calls = []

    def mock_sleep(duration):
        sleep_calls.append(duration)

    monkeypatch.setattr(time, "sleep", mock_sleep)

    rate, warnings = fetch_exchange_rate(max_attempts=5, base_delay=1, quick_fail=True)

    assert rate == 100000
    assert len(warnings) == 2
    assert len(request_calls) == 1
    assert sleep_calls == []


def test_number_formatting_helpers():
    assert parse_formatted_number("1,234,567") == 1234567.0
    assert format_number(1234567.4) == "1,234,567"
    assert format_percentage(12.345) == "12.3%"
    assert format_percentage(12.345, decimals=0) == "12%"
    assert format_btc(0.5) == "₿0.50"
