import pytest
from datetime import datetime, time, timezone

from batches.models import MealWindow, OperatingHours
from dispatch.window import (
    can_dispatch,
    evaluate_window,
    formatted_end_time,
    parse_end_time,
    time_until_dispatch,
)


@pytest.fixture
def lunch_only_hours():
    return {"lunch": {"endTime": "14:00"}}


def at(hour, minute):
    return datetime(2024, 1, 1, hour, minute, tzinfo=timezone.utc)


def test_one_minute_before_cutoff(lunch_only_hours):
    now = at(13, 59)

    assert can_dispatch("LUNCH", lunch_only_hours, now) is False
    assert time_until_dispatch("LUNCH", lunch_only_hours, now) == "1m"


def test_at_cutoff_is_eligible(lunch_only_hours):
    now = at(14, 0)

    assert can_dispatch("LUNCH", lunch_only_hours, now) is True
    assert time_until_dispatch("LUNCH", lunch_only_hours, now) == "Now"


def test_eligibility_is_monotonic_around_the_cutoff(lunch_only_hours):
    """
    False for every minute strictly before 14:00, True at and after it.
    """
    cutoff = 14 * 60
    for minute_of_day in range(0, 24 * 60):
        now = time(minute_of_day // 60, minute_of_day % 60)
        assert can_dispatch(MealWindow.LUNCH, lunch_only_hours, now) is (minute_of_day >= cutoff)


def test_missing_configuration_fails_closed(lunch_only_hours):
    now = at(23, 0)

    assert can_dispatch("DINNER", lunch_only_hours, now) is False
    assert can_dispatch("LUNCH", None, now) is False
    assert time_until_dispatch("DINNER", lunch_only_hours, now) == "N/A"
    assert formatted_end_time("DINNER", lunch_only_hours) == "N/A"


@pytest.mark.parametrize("end_time", ["", "noon", "25:00", "14:75", "14", "14-00", "1400"])
def test_malformed_end_times_are_treated_as_absent(end_time):
    hours = {"lunch": {"endTime": end_time}}

    assert can_dispatch("LUNCH", hours, at(23, 59)) is False
    assert time_until_dispatch("LUNCH", hours, at(10, 0)) == "N/A"
    assert formatted_end_time("LUNCH", hours) == "N/A"


def test_time_until_dispatch_renders_hours_and_minutes():
    hours = OperatingHours(lunch_end="14:00", dinner_end="21:30")

    assert time_until_dispatch("LUNCH", hours, at(11, 45)) == "2h 15m"
    assert time_until_dispatch("LUNCH", hours, at(13, 0)) == "1h 0m"
    assert time_until_dispatch("DINNER", hours, at(21, 1)) == "29m"
    assert time_until_dispatch("DINNER", hours, at(23, 0)) == "Now"


def test_parse_end_time_tolerates_single_digits():
    assert parse_end_time("9:5") == (9, 5)
    assert parse_end_time("09:05") == (9, 5)
    assert parse_end_time("14:00:00") == (14, 0)
    assert parse_end_time(None) is None


@pytest.mark.parametrize(
    "end_time, expected",
    [
        ("00:00", "12:00 AM"),
        ("0:30", "12:30 AM"),
        ("09:05", "9:05 AM"),
        ("12:00", "12:00 PM"),
        ("14:00", "2:00 PM"),
        ("23:45", "11:45 PM"),
    ],
)
def test_formatted_end_time(end_time, expected):
    assert formatted_end_time("DINNER", {"dinner": {"endTime": end_time}}) == expected


def test_evaluate_window_keeps_force_separate(lunch_only_hours):
    early = evaluate_window("LUNCH", lunch_only_hours, at(12, 0), force=True)
    late = evaluate_window("LUNCH", lunch_only_hours, at(15, 0))

    assert early.eligible is False
    assert early.force is True
    assert early.time_remaining == "2h 0m"
    assert early.formatted_cutoff == "2:00 PM"

    assert late.eligible is True
    assert late.force is False
    assert late.time_remaining == "Now"


def test_evaluate_window_unknown_window():
    assert evaluate_window("BREAKFAST", {"lunch": {"endTime": "14:00"}}, at(12, 0)) is None
    assert can_dispatch("BREAKFAST", {"lunch": {"endTime": "14:00"}}, at(23, 0)) is False


def test_overnight_cutoff_is_same_day_minute_of_day():
    """
    A 02:00 dinner cutoff is compared on the same day, so the evening
    before reads as already past.
    """
    hours = {"dinner": {"endTime": "02:00"}}

    assert can_dispatch("DINNER", hours, at(1, 0)) is False
    assert can_dispatch("DINNER", hours, at(20, 0)) is True
