from __future__ import annotations

from dataclasses import dataclass
import re

from ttml_lyrics.lyric.model import LyricDocument, LyricLine, LyricMetadata, LyricWord

_TS_RE = re.compile(r"\[(\d{1,3}):(\d{2})(?:\.(\d{1,3}))?\]")  # [mm:ss] / [mm:ss.xx] / [mm:ss.xxx]
_OFFSET_RE = re.compile(r"^\[offset:([+-]?\d+)\]\s*$", re.IGNORECASE)
_TAG_RE = re.compile(r"^\[([a-zA-Z]{1,8}):(.*)\]\s*$")

# LRC tag -> metadata key
TAG_KEYS = {
    "ar": "artist",
    "ti": "musicName",
    "al": "album",
    "la": "language",
    "lang": "language",
}


class LrcParseError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class LrcParseStats:
    lines_total: int
    events_total: int
    lines_with_timestamps: int
    lines_ignored: int
    offset_ms: int


def _parse_ts_to_ms(m: int, s: int, frac: str | None) -> int:
    if not (0 <= s <= 59):
        raise LrcParseError(f"Invalid seconds: {s}")
    if frac is None:
        ms = 0
    else:
        # "2" -> 200ms, "23" -> 230ms, "234" -> 234ms
        ms = int(frac.ljust(3, "0")[:3])
    return (m * 60 + s) * 1000 + ms


def parse_lrc_with_stats(text: str, last_line_duration_ms: int = 2000) -> tuple[LyricDocument, LrcParseStats]:
    """
    Supported:
    - [mm:ss], [mm:ss.xx], [mm:ss.xxx]
    - multiple timestamps per line
    - [offset:+/-ms]
    - basic tags: [ar:], [ti:], [al:], [la:], ...

    Each timed line becomes a one-word line ending where the next one starts
    (the last one lasts last_line_duration_ms). Lines are sorted by time then
    text, duplicates removed, negative times clamped to 0.
    """
    offset_ms = 0
    tags: dict[str, list[str]] = {}
    events: list[tuple[int, str]] = []

    total = 0
    lines_with_ts = 0
    ignored = 0

    for raw in text.splitlines():
        total += 1
        line = raw.rstrip("\n")
        if not line.strip():
            ignored += 1
            continue

        off = _OFFSET_RE.match(line)
        if off:
            try:
                offset_ms = int(off.group(1))
            except ValueError as e:
                raise LrcParseError("Invalid offset") from e
            continue

        tag = _TAG_RE.match(line)
        if tag and not _TS_RE.search(line):
            k = tag.group(1).strip().lower()
            v = tag.group(2).strip()
            if k and v:
                tags.setdefault(TAG_KEYS.get(k, k), []).append(v)
            continue

        ts = list(_TS_RE.finditer(line))
        if not ts:
            ignored += 1
            continue

        lines_with_ts += 1
        payload = line[ts[-1].end() :].lstrip()

        for m in ts:
            t_ms = _parse_ts_to_ms(int(m.group(1)), int(m.group(2)), m.group(3)) + offset_ms
            if t_ms < 0:
                t_ms = 0
            events.append((t_ms, payload))

    events = sorted(set(events))

    lines: list[LyricLine] = []
    for i, (t_ms, payload) in enumerate(events):
        end_ms = events[i + 1][0] if i + 1 < len(events) else t_ms + last_line_duration_ms
        end_ms = max(end_ms, t_ms)
        lines.append(
            LyricLine(
                words=(LyricWord(word=payload, start_ms=t_ms, end_ms=end_ms),),
                start_ms=t_ms,
                end_ms=end_ms,
            )
        )

    doc = LyricDocument(
        lyric_lines=tuple(lines),
        metadata=tuple(LyricMetadata(key=k, value=tuple(v)) for k, v in tags.items()),
    )
    stats = LrcParseStats(
        lines_total=total,
        events_total=len(lines),
        lines_with_timestamps=lines_with_ts,
        lines_ignored=ignored,
        offset_ms=offset_ms,
    )
    return doc, stats


def parse_lrc(text: str, last_line_duration_ms: int = 2000) -> LyricDocument:
    doc, _stats = parse_lrc_with_stats(text, last_line_duration_ms)
    return doc
