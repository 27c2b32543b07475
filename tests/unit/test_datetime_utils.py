"""Unit tests for shared datetime helpers."""

from datetime import datetime, timedelta, timezone

import pytest
from libs.common.datetime_utils import add_months, as_utc, timeframe_start, utc_now


@pytest.mark.unit
def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2024, 1, 31, tzinfo=timezone.utc), 1) == datetime(
        2024, 2, 29, tzinfo=timezone.utc
    )
    assert add_months(datetime(2023, 12, 15), 1) == datetime(2024, 1, 15)


@pytest.mark.unit
def test_as_utc_assumes_naive_values_are_utc():
    naive = datetime(2024, 5, 1, 12, 0)
    assert as_utc(naive).tzinfo == timezone.utc
    assert as_utc(naive).hour == 12


@pytest.mark.unit
def test_timeframe_start():
    now = utc_now()
    assert now - timeframe_start("7d", now) == timedelta(days=7)
    assert now - timeframe_start("1y", now) == timedelta(days=365)
    assert now - timeframe_start("bogus", now) == timedelta(days=30)
