import pytest

from ttml_lyrics.lrc.export import export_lrc
from ttml_lyrics.lrc.parse import LrcParseError, parse_lrc, parse_lrc_with_stats
from ttml_lyrics.ttml.writer import TimingMode, infer_timing_mode


def test_parse_multiple_timestamps():
    doc = parse_lrc("[00:01.00][00:02.5]hey\n")
    assert [ln.start_ms for ln in doc.lyric_lines] == [1000, 2500]
    assert [ln.text for ln in doc.lyric_lines] == ["hey", "hey"]
    # each line ends where the next one starts
    assert [ln.end_ms for ln in doc.lyric_lines] == [2500, 4500]
    assert doc.lyric_lines[0].words[0].end_ms == 2500


def test_parse_offset_clamped():
    doc, stats = parse_lrc_with_stats("[offset:-1500]\n[00:01.00]x\n")
    assert stats.offset_ms == -1500
    assert doc.lyric_lines[0].start_ms == 0


def test_parse_tags_to_metadata():
    doc = parse_lrc("[ar:Artist]\n[la:ja]\n[re:tool]\n[00:01.00]x\n")
    assert {m.key: m.value for m in doc.metadata} == {
        "artist": ("Artist",),
        "language": ("ja",),
        "re": ("tool",),
    }


def test_parse_stats():
    _doc, stats = parse_lrc_with_stats("[ti:T]\n\nnot lyric\n[00:01.00]a\n[00:01.00]a\n")
    assert stats.lines_total == 5
    assert stats.lines_with_timestamps == 2
    assert stats.lines_ignored == 2
    assert stats.events_total == 1


def test_parse_invalid_seconds():
    with pytest.raises(LrcParseError):
        parse_lrc("[00:75.00]x\n")


def test_parsed_lrc_is_line_timed():
    doc = parse_lrc("[00:01.00]one line\n[00:02.00]two\n")
    assert infer_timing_mode(doc.lyric_lines) is TimingMode.LINE


def test_export_lrc():
    doc = parse_lrc("[ar:Artist]\n[00:02.00]b\n[00:01.234]a\n")
    assert export_lrc(doc) == "[ar:Artist]\n[00:01.23]a\n[00:02.00]b\n"
    assert export_lrc(doc, include_tags=False) == "[00:01.23]a\n[00:02.00]b\n"


def test_export_lrc_past_one_hour_round_trips():
    doc = parse_lrc("[61:40.00]x\n")
    assert doc.lyric_lines[0].start_ms == 3_700_000
    text = export_lrc(doc)
    assert text == "[61:40.00]x\n"
    assert [ln.start_ms for ln in parse_lrc(text).lyric_lines] == [3_700_000]
