from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from ttml_lyrics.cli import app
from ttml_lyrics.sources.types import LookupRecord

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("TTML_LYRICS_LANG", raising=False)
    monkeypatch.delenv("TTML_LYRICS_PRETTY", raising=False)


def test_import_text_to_stdout(tmp_path):
    src = tmp_path / "song.txt"
    src.write_text("hello\\world\n你好\n", encoding="utf-8")

    result = runner.invoke(app, ["import-text", str(src), "--mode", "lyric-trans", "--lang", "ja"])
    assert result.exit_code == 0, result.output
    assert 'itunes:timing="None"' in result.output
    assert 'xml:lang="ja"' in result.output
    assert 'ttm:role="x-translation"' in result.output


def test_import_text_save_persists_options(tmp_path):
    src = tmp_path / "song.txt"
    src.write_text("<bg\n", encoding="utf-8")
    out = tmp_path / "song.ttml"

    result = runner.invoke(
        app,
        ["import-text", str(src), "--prefix-markup", "--bg-prefix", "<", "--save", "--out", str(out)],
    )
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8").startswith("<tt ")

    data = json.loads((tmp_path / "config" / "ttml-lyrics" / "config.json").read_text(encoding="utf-8"))
    assert data["text_import"]["prefix_markup_enabled"] is True


def test_import_text_empty_input(tmp_path):
    src = tmp_path / "empty.txt"
    src.write_text("  \n\n", encoding="utf-8")

    result = runner.invoke(app, ["import-text", str(src)])
    assert result.exit_code == 1


def test_convert_lrc_to_ttml(tmp_path):
    src = tmp_path / "song.lrc"
    src.write_text("[la:ko]\n[00:01.00]one\n[00:02.50]two\n", encoding="utf-8")

    result = runner.invoke(app, ["convert", str(src), "--pretty"])
    assert result.exit_code == 0, result.output
    assert 'itunes:timing="Line"' in result.output
    assert 'xml:lang="ko"' in result.output
    assert 'begin="00:02.500"' in result.output
    assert "\n" in result.output.strip()


def test_convert_lrc_to_lrc(tmp_path):
    src = tmp_path / "song.lrc"
    src.write_text("[00:02.00]b\n[00:01.00]a\n", encoding="utf-8")

    result = runner.invoke(app, ["convert", str(src), "--to", "lrc"])
    assert result.exit_code == 0, result.output
    assert result.output == "[00:01.00]a\n[00:02.00]b\n"


def test_parse_prints_stats(tmp_path):
    src = tmp_path / "song.lrc"
    src.write_text("[ar:A]\n[00:01.00]a\n", encoding="utf-8")

    result = runner.invoke(app, ["parse", str(src)])
    assert result.exit_code == 0, result.output
    assert "events_total=1" in result.output
    assert "'artist': ['A']" in result.output


def test_search_lists_results():
    records = [LookupRecord.from_api({"id": 9, "trackName": "Song", "artistName": "Artist", "plainLyrics": "x"})]
    with patch("ttml_lyrics.cli.LrcLibSource.search", return_value=records):
        result = runner.invoke(app, ["search", "--track", "Song"])
    assert result.exit_code == 0, result.output
    assert "1. Artist - Song" in result.output
    assert "ID: 9" in result.output


def test_fetch_exports_record():
    record = LookupRecord.from_api({"id": 9, "trackName": "Song", "artistName": "A", "plainLyrics": "hi there"})
    with patch("ttml_lyrics.cli.LrcLibSource.get", return_value=record):
        result = runner.invoke(app, ["fetch", "9", "--escape-spaces"])
    assert result.exit_code == 0, result.output
    assert 'itunes:timing="None"' in result.output
    assert ">hi<" in result.output


def test_fetch_missing_record():
    with patch("ttml_lyrics.cli.LrcLibSource.get", return_value=None):
        result = runner.invoke(app, ["fetch", "9"])
    assert result.exit_code == 1


def test_import_text_flags_override_saved_options(tmp_path):
    src = tmp_path / "song.txt"
    src.write_text("<hello\n", encoding="utf-8")

    result = runner.invoke(app, ["import-text", str(src), "--prefix-markup", "--save"])
    assert result.exit_code == 0, result.output
    assert ">hello</p>" in result.output

    # saved option still applies when the flag is omitted
    result = runner.invoke(app, ["import-text", str(src)])
    assert result.exit_code == 0, result.output
    assert ">hello</p>" in result.output

    result = runner.invoke(app, ["import-text", str(src), "--no-prefix-markup", "--save"])
    assert result.exit_code == 0, result.output
    assert "&lt;hello</p>" in result.output

    data = json.loads((tmp_path / "config" / "ttml-lyrics" / "config.json").read_text(encoding="utf-8"))
    assert data["text_import"]["prefix_markup_enabled"] is False


def test_parse_invalid_lrc(tmp_path):
    src = tmp_path / "bad.lrc"
    src.write_text("[00:75.00]x\n", encoding="utf-8")

    result = runner.invoke(app, ["parse", str(src)])
    assert result.exit_code == 1
    # handled exit, not a traceback
    assert isinstance(result.exception, SystemExit)
