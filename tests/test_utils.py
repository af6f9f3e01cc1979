"""Tests for the shared formatting helpers."""

from datetime import datetime

import pytest

from system.utils import format_duration, get_formatted_timestamp


@pytest.mark.parametrize("seconds,fixed,expected", [
    (0, False, "00:00"),
    (9, False, "00:09"),
    (599, False, "09:59"),
    (3725, False, "01:02:05"),
    (65, True, "00:01:05"),
    (-1, False, "--:--"),
    (None, False, "--:--"),
    (True, False, "--:--"),
])
def test_format_duration(seconds, fixed, expected):
    assert format_duration(seconds, fixed=fixed) == expected


def test_formatted_timestamp():
    assert get_formatted_timestamp(datetime(2026, 10, 19, 13, 5, 9)) == "19.10.2026 13:05:09"
