from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

import typer

from ttml_lyrics.config import AppConfig, load_config, save_text_import_config
from ttml_lyrics.importers.lookup import import_lookup_result
from ttml_lyrics.importers.plain_text import ChannelMode, GroupingMode, import_plain_text
from ttml_lyrics.logging_setup import setup_logging
from ttml_lyrics.lrc.export import export_lrc
from ttml_lyrics.lrc.parse import LrcParseError, parse_lrc_with_stats
from ttml_lyrics.lyric.model import LyricDocument
from ttml_lyrics.sources.lrclib import LrcLibSource
from ttml_lyrics.ttml.errors import TtmlEncodeError
from ttml_lyrics.ttml.writer import export_ttml

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, add_completion=False)


@app.callback()
def _main(debug: bool = typer.Option(False, "--debug", help="Enable debug logging")):
    setup_logging(debug)


def _source(cfg: AppConfig) -> LrcLibSource:
    return LrcLibSource(
        max_retries=cfg.api_max_retries,
        backoff_base_s=cfg.api_backoff_base_s,
        timeout_s=cfg.api_timeout_s,
    )


def _write_ttml(doc: LyricDocument, cfg: AppConfig, *, out: Path | None, pretty: bool, lang: str | None) -> None:
    if doc.is_empty:
        typer.echo("No lyrics content found", err=True)
        raise typer.Exit(code=1)
    try:
        data = export_ttml(doc, fallback_language=lang or cfg.lang, pretty=pretty or cfg.pretty)
    except TtmlEncodeError as e:
        logger.exception("TTML export failed")
        typer.echo(f"Failed to export TTML: {e}", err=True)
        raise typer.Exit(code=2)
    _emit(data, out)


def _emit(data: str, out: Path | None) -> None:
    if out:
        out.write_text(data, encoding="utf-8")
    else:
        typer.echo(data)


@app.command("import-text")
def import_text(
    text_path: Path,
    mode: ChannelMode | None = typer.Option(None, "--mode", help="Channels in the text"),
    grouping: GroupingMode | None = typer.Option(None, "--grouping", help="How sub channels are laid out"),
    separator: str | None = typer.Option(None, "--separator", help="Same-line channel separator"),
    swap: bool | None = typer.Option(None, "--swap/--no-swap", help="Swap translation and romanization"),
    word_separator: str | None = typer.Option(None, "--word-separator", help="Word separator ('' = whole line)"),
    prefix_markup: bool | None = typer.Option(None, "--prefix-markup/--no-prefix-markup", help="Enable background/duet prefixes"),
    bg_prefix: str | None = typer.Option(None, "--bg-prefix"),
    duet_prefix: str | None = typer.Option(None, "--duet-prefix"),
    empty_beat: bool | None = typer.Option(None, "--empty-beat/--no-empty-beat", help="Fold trailing beat symbols"),
    empty_beat_symbol: str | None = typer.Option(None, "--empty-beat-symbol"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
    pretty: bool = typer.Option(False, "--pretty", help="Indent the output"),
    lang: str | None = typer.Option(None, "--lang", help="Fallback xml:lang"),
    save: bool = typer.Option(False, "--save", help="Remember the import options"),
):
    """Import plain text lyrics and export them as TTML."""
    cfg = load_config()
    overrides = {
        "channel_mode": mode,
        "grouping_mode": grouping,
        "line_separator": separator,
        "swap_translation_and_romanization": swap,
        "word_separator": word_separator,
        "prefix_markup_enabled": prefix_markup,
        "background_prefix": bg_prefix,
        "duet_prefix": duet_prefix,
        "empty_beat_enabled": empty_beat,
        "empty_beat_symbol": empty_beat_symbol,
    }
    import_cfg = replace(cfg.text_import, **{k: v for k, v in overrides.items() if v is not None})
    if save:
        save_text_import_config(import_cfg, cfg.config_dir)

    doc = import_plain_text(text_path.read_text(encoding="utf-8"), import_cfg)
    _write_ttml(doc, cfg, out=out, pretty=pretty, lang=lang)


@app.command()
def convert(
    lrc_path: Path,
    to: str = typer.Option("ttml", "--to", case_sensitive=False, help="ttml|lrc"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
    pretty: bool = typer.Option(False, "--pretty", help="Indent the output"),
    lang: str | None = typer.Option(None, "--lang", help="Fallback xml:lang"),
):
    """Convert LRC to TTML (or normalized LRC)."""
    cfg = load_config()
    try:
        doc, _stats = parse_lrc_with_stats(lrc_path.read_text(encoding="utf-8"))
    except LrcParseError as e:
        typer.echo(f"Invalid LRC: {e}", err=True)
        raise typer.Exit(code=1)

    fmt = to.lower()
    if fmt == "ttml":
        _write_ttml(doc, cfg, out=out, pretty=pretty, lang=lang)
    elif fmt == "lrc":
        data = export_lrc(doc)
        if out:
            out.write_text(data, encoding="utf-8")
        else:
            typer.echo(data, nl=False)
    else:
        raise typer.BadParameter("format must be one of: ttml, lrc")


@app.command()
def parse(lrc_path: Path):
    """Parse LRC and print stats."""
    try:
        doc, stats = parse_lrc_with_stats(lrc_path.read_text(encoding="utf-8"))
    except LrcParseError as e:
        typer.echo(f"Invalid LRC: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"lines_total={stats.lines_total}")
    typer.echo(f"lines_with_timestamps={stats.lines_with_timestamps}")
    typer.echo(f"lines_ignored={stats.lines_ignored}")
    typer.echo(f"events_total={stats.events_total}")
    typer.echo(f"offset_ms={stats.offset_ms}")
    metadata = {m.key: list(m.value) for m in doc.metadata}
    typer.echo(f"metadata={metadata}")


@app.command()
def search(
    track: str = typer.Option(..., "--track", "-t", help="Track name"),
    artist: str | None = typer.Option(None, "--artist", "-a", help="Artist name"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum results to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Search lyrics on lrclib."""
    cfg = load_config()
    results = _source(cfg).search(track_name=track, artist_name=artist)[:limit]

    if not results:
        typer.echo("No results found")
        return

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": r.id,
                        "track_name": r.display_name,
                        "artist_name": r.artist_name,
                        "album_name": r.album_name,
                        "duration": r.duration,
                        "has_synced_lyrics": r.has_synced_lyrics,
                        "has_plain_lyrics": r.has_plain_lyrics,
                    }
                    for r in results
                ],
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    for i, r in enumerate(results, 1):
        synced = "✓" if r.has_synced_lyrics else "✗"
        plain = "✓" if r.has_plain_lyrics else "✗"
        typer.echo(f"{i}. {r.artist_name} - {r.display_name}")
        if r.album_name:
            typer.echo(f"   Album: {r.album_name}")
        typer.echo(f"   Synced: {synced}  Plain: {plain}")
        if r.id is not None:
            typer.echo(f"   ID: {r.id}")
        typer.echo()


@app.command()
def fetch(
    record_id: int,
    escape_spaces: bool = typer.Option(False, "--escape-spaces", help="Split words on spaces"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
    pretty: bool = typer.Option(False, "--pretty", help="Indent the output"),
    lang: str | None = typer.Option(None, "--lang", help="Fallback xml:lang"),
):
    """Fetch an lrclib record by id and export it as TTML."""
    cfg = load_config()
    record = _source(cfg).get(record_id)
    if record is None:
        typer.echo(f"Record {record_id} not found", err=True)
        raise typer.Exit(code=1)
    doc = import_lookup_result(record, escape=escape_spaces)
    _write_ttml(doc, cfg, out=out, pretty=pretty, lang=lang)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
