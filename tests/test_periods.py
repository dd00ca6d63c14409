from datetime import datetime
from zoneinfo import ZoneInfo
import pytest
from core.periods import get_period_window, get_filter_window

TZ = ZoneInfo("Asia/Shanghai")
# 2024-01-10 是星期三
WEDNESDAY = datetime(2024, 1, 10, 15, 30, 12, tzinfo=TZ)


def test_week_starts_on_monday():
    window = get_period_window("week", WEDNESDAY)
    assert window.start == datetime(2024, 1, 8, 0, 0, 0, tzinfo=TZ)
    assert window.end == datetime(2024, 1, 10, 23, 59, 59, tzinfo=TZ)


def test_week_on_monday_starts_same_day():
    monday = datetime(2024, 1, 8, 9, 0, tzinfo=TZ)
    assert get_period_window("week", monday).start == datetime(2024, 1, 8, tzinfo=TZ)


def test_week_on_sunday_starts_previous_monday():
    sunday = datetime(2024, 1, 14, 9, 0, tzinfo=TZ)
    assert get_period_window("week", sunday).start == datetime(2024, 1, 8, tzinfo=TZ)


@pytest.mark.parametrize("period,start", [
    ("day", datetime(2024, 1, 10, tzinfo=TZ)),
    ("month", datetime(2024, 1, 1, tzinfo=TZ)),
    ("year", datetime(2024, 1, 1, tzinfo=TZ)),
])
def test_period_starts(period, start):
    window = get_period_window(period, WEDNESDAY)
    assert window.start == start
    assert window.end == datetime(2024, 1, 10, 23, 59, 59, tzinfo=TZ)


def test_unknown_period():
    with pytest.raises(ValueError):
        get_period_window("decade", WEDNESDAY)


def test_filter_all_has_no_window():
    assert get_filter_window("all", WEDNESDAY) is None


def test_filter_week_is_rolling_seven_days():
    window = get_filter_window("week", WEDNESDAY)
    assert window.start == datetime(2024, 1, 3, tzinfo=TZ)


def test_filter_today():
    window = get_filter_window("today", WEDNESDAY)
    assert window.start == datetime(2024, 1, 10, tzinfo=TZ)
    assert window.end.hour == 23
