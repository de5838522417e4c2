# utils.py
import json
import logging
import secrets
import time
from datetime import datetime

import requests

from config import (
    DEFAULT_FALLBACK_PRICE,
    DEFAULT_MAX_ATTEMPTS,
    PRICE_API_TIMEOUT,
    PRICE_API_URL,
)

_secure_random = secrets.SystemRandom()

_FETCH_ERRORS = (
    requests.exceptions.RequestException,
    ValueError,
    KeyError,
    json.JSONDecodeError,
)


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _request_exchange_rate(session: requests.Session, currency: str) -> float:
    response = session.get(PRICE_API_URL, timeout=PRICE_API_TIMEOUT)
    response.raise_for_status()
    rate = float(response.json()[currency])
    if rate <= 0:
        raise KeyError(f"{currency} price not found or invalid")
    return rate


def fetch_exchange_rate(
    currency: str = "USD",
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = 2,
    fallback_rate: float = DEFAULT_FALLBACK_PRICE,
    jitter: float = 0,
    quick_fail: bool = False,
) -> tuple[float, list[str]]:
    """Look up today's BTC exchange rate to seed a projection.

    The engine never performs I/O; hosts call this to prefill
    ``SimulationConfig.exchange_rate``. Failed attempts are retried with
    exponential backoff (``base_delay * 2 ** attempt`` plus up to ``jitter``
    seconds). ``quick_fail`` makes a single attempt and never sleeps.

    Returns:
        tuple: ``(rate, warnings)``. ``rate`` is ``fallback_rate`` when every
            attempt fails, and ``warnings`` lists one message per failure plus
            one announcing the fallback.
    """
    warnings = []
    attempts = 1 if quick_fail else max_attempts

    with requests.Session() as session:
        for attempt in range(attempts):
            try:
                return _request_exchange_rate(session, currency), warnings
            except _FETCH_ERRORS as e:
                message = (
                    f"[{_timestamp()}] Attempt {attempt + 1} failed to get "
                    f"BTC/{currency} exchange rate: {e}"
                )
                logging.warning(message)
                warnings.append(message)
            if attempt < attempts - 1:
                delay = base_delay * (2 ** attempt)
                if jitter:
                    delay += _secure_random.uniform(0, jitter)
                time.sleep(delay)

    message = (
        f"[{_timestamp()}] Could not fetch the BTC/{currency} exchange rate after "
        f"{attempts} attempt(s). Using fallback rate of {fallback_rate:,}"
    )
    logging.warning(message)
    warnings.append(message)
    return fallback_rate, warnings


def parse_formatted_number(value: str) -> float:
    """Parse a display string such as ``"100,000"`` back to a number.

    Examples
    --------
    >>> parse_formatted_number("1,234,567")
    1234567.0
    """
    return float(value.replace(",", ""))


def format_number(value: float) -> str:
    """Whole number with thousands separators."""
    return f"{int(round(value)):,}"


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def format_btc(value: float, decimals: int = 2) -> str:
    return f"₿{value:.{decimals}f}"
