from datetime import datetime, timezone

import pytest

from formstamp.core.markup.datetime_format import DEFAULT_FORMAT, format_date_time, localize

MOMENT = datetime(2024, 3, 5, 14, 7, 9)


@pytest.mark.parametrize("fmt, expected", [
    ("MM/dd/yyyy", "03/05/2024"),
    ("dd/MM/yyyy", "05/03/2024"),
    ("yyyy-MM-dd HH:mm:ss", "2024-03-05 14:07:09"),
    ("MMM dd, yyyy", "Mar 05, 2024"),
    ("MMMM dd, yyyy", "March 05, 2024"),
    ("hh:mm:ss a", "02:07:09 PM"),
    ("EEEE, MMMM dd, yyyy", "Tuesday, March 05, 2024"),
])
def test_patterns(fmt, expected):
    assert format_date_time(MOMENT, fmt) == expected


def test_midnight_is_twelve_am():
    assert format_date_time(datetime(2024, 1, 1, 0, 30), "hh:mm a") == "12:30 AM"


def test_empty_format_uses_default():
    assert format_date_time(MOMENT, "") == format_date_time(MOMENT, DEFAULT_FORMAT)


def test_timezone_conversion():
    aware = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert format_date_time(aware, "HH:mm", "Asia/Tokyo") == "21:00"


def test_unknown_timezone_leaves_value_alone():
    assert localize(MOMENT, "Not/AZone") is MOMENT


def test_quoted_text_is_literal():
    assert format_date_time(MOMENT, "MMM dd, yyyy 'at' hh:mm a") == "Mar 05, 2024 at 02:07 PM"
    assert format_date_time(MOMENT, "'yyyy' yyyy") == "yyyy 2024"
    assert format_date_time(MOMENT, "'It''s' HH''mm") == "It's 14'07"


def test_letter_a_inside_words_is_kept():
    assert format_date_time(MOMENT, "Date: MM/dd") == "Date: 03/05"
    assert format_date_time(MOMENT, "HH:mm at noon") == "14:07 at noon"
