import pytest

from swordclick.formatting import describe_duration, format_clock, format_number, format_pct


@pytest.mark.parametrize("value, text", [
    (0, "0"),
    (7.9, "7"),
    (999, "999"),
    (1000, "1.00K"),
    (1234, "1.23K"),
    (12_345, "12.3K"),
    (123_456, "123K"),
    (45_600_000, "45.6M"),
    (1_500_000_000, "1.50B"),
    (2e12, "2.00T"),
])
def test_format_number(value, text):
    assert format_number(value) == text


def test_format_number_past_named_suffixes():
    assert format_number(3e21) == "3.00e21"


def test_format_clock():
    assert format_clock(0) == "00:00"
    assert format_clock(65) == "01:05"
    assert format_clock(3725) == "1:02:05"
    assert format_clock(-5) == "00:00"


def test_format_pct():
    assert format_pct(0.256) == "26%"
    assert format_pct(1) == "100%"


def test_describe_duration():
    assert describe_duration(28_800) == "8.0 hours"
    assert describe_duration(125) == "2 minutes"
    assert describe_duration(42) == "42 seconds"
