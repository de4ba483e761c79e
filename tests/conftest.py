"""Shared fixtures for readiness tests."""

from datetime import date, timedelta

import pytest

from readiness_core.models import DailyMetric


# Monday, so scored days default to a weekday
AS_OF = date(2024, 1, 15)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def history_factory():
    """Build `days` identical daily metrics ending the day before `end`."""

    def make(days=14, end=AS_OF, **values):
        return [
            DailyMetric(date=end - timedelta(days=offset), **values)
            for offset in range(days, 0, -1)
        ]

    return make


@pytest.fixture
def steady_history(history_factory):
    """Two weeks at HRV 50, RHR 50, 8h sleep scored 85, 14 breaths/min."""
    return history_factory(
        hrv=50.0,
        rhr=50.0,
        sleep_hours=8.0,
        sleep_score=85.0,
        respiratory_rate=14.0,
    )
