"""
"Current time" providers used by the retrieval and creation logic.

Handlers never call datetime.now() directly: they receive a Clock through a
FastAPI dependency. Normal operation uses the system clock. When TEST_MODE is
enabled the application installs a clock that honors the x-test-now-ms
request header, so expiry can be tested deterministically.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Request

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Builds a Clock for one request
ClockProvider = Callable[[Request], Clock]

TEST_NOW_HEADER = "x-test-now-ms"


def system_clock() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


def parse_test_now(value: Optional[str]) -> Optional[datetime]:
    """
    Convert an x-test-now-ms header value to a UTC datetime.

    Returns None when the value is missing or not a number.
    """
    if not value:
        return None
    try:
        timestamp_ms = int(value)
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        logger.warning(f"Invalid {TEST_NOW_HEADER} header: {e}")
        return None


def system_clock_provider(request: Request) -> Clock:
    return system_clock


def header_clock_provider(request: Request) -> Clock:
    """Clock provider for TEST_MODE: the header wins, system time otherwise."""
    override = parse_test_now(request.headers.get(TEST_NOW_HEADER))
    if override is None:
        return system_clock
    return lambda: override


def fixed_clock_provider(clock: Clock) -> ClockProvider:
    """Wrap a plain clock so every request sees it."""
    return lambda request: clock
