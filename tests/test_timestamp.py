import pytest

from ttml_lyrics.lyric.timestamp import TimestampError, ms_to_timestamp, timestamp_to_ms


def test_format_minutes_and_hours():
    assert ms_to_timestamp(0) == "00:00.000"
    assert ms_to_timestamp(61_234) == "01:01.234"
    assert ms_to_timestamp(3_600_000) == "01:00:00.000"
    assert ms_to_timestamp(-5) == "00:00.000"


def test_format_centiseconds():
    assert ms_to_timestamp(61_239, precise=False) == "01:01.23"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("01:01.234", 61_234),
        ("00:02.5", 2_500),
        ("00:02.05", 2_050),
        ("00:07", 7_000),
        ("01:00:00.000", 3_600_000),
    ],
)
def test_parse(text, expected):
    assert timestamp_to_ms(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "00:60.000", "1:75:00.000", "00:01.2345"])
def test_parse_rejects_invalid(text):
    with pytest.raises(TimestampError):
        timestamp_to_ms(text)


@pytest.mark.parametrize("ms", [0, 1, 999, 59_999, 3_599_999, 3_600_000, 86_399_999])
def test_round_trip_is_exact(ms):
    assert timestamp_to_ms(ms_to_timestamp(ms)) == ms
