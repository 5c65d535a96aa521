from datetime import datetime, timedelta, timezone

START_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Clock the tests can move forward by hand."""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)
