import pytest
from datetime import timedelta
from sketchrelay.services.common.duration import parse_duration, format_remaining


@pytest.mark.parametrize("value, expected", [
    ("3d", timedelta(days=3)),
    ("2h", timedelta(hours=2)),
    ("1h30m", timedelta(hours=1, minutes=30)),
    ("2d5m", timedelta(days=2, minutes=5)),
    ("45s", timedelta(seconds=45)),
    (" 7D ", timedelta(days=7)),
])
def test_parse_duration_valid(value, expected):
    assert parse_duration(value) == expected

@pytest.mark.parametrize("value", [None, "", "0d", "0h0m", "soon", "5", "d5", "30m1h", "1h1h", "1w", "-1d"])
def test_parse_duration_absent(value):
    # 해석할 수 없으면 None = 기능 꺼짐 (에러 아님)
    assert parse_duration(value) is None

@pytest.mark.parametrize("delta, expected", [
    (timedelta(seconds=30), "<1m"),
    (timedelta(0), "<1m"),
    (timedelta(minutes=45), "45m"),
    (timedelta(hours=1, minutes=5), "1h 5m"),
    (timedelta(days=2, hours=3, minutes=10), "2d 3h"),
    (timedelta(days=1), "1d"),
])
def test_format_remaining(delta, expected):
    assert format_remaining(delta) == expected
