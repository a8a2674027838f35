from __future__ import annotations

from ttml_lyrics.lyric.model import LyricDocument

_KEY_TAGS = {"artist": "ar", "musicName": "ti", "album": "al", "language": "la"}


def _fmt_lrc_time(ms: int) -> str:
    m, rem = divmod(max(ms, 0), 60_000)
    s, ms2 = divmod(rem, 1_000)
    # minutes keep counting past the hour
    return f"{m:02d}:{s:02d}.{ms2 // 10:02d}"


def export_lrc(doc: LyricDocument, include_tags: bool = True) -> str:
    """
    One [mm:ss.xx] line per content line. Separator lines, background
    markers and translations are dropped.
    """
    out: list[str] = []
    if include_tags:
        for meta in doc.metadata:
            tag = _KEY_TAGS.get(meta.key, meta.key)
            for value in meta.value:
                if value.strip():
                    out.append(f"[{tag}:{value.strip()}]")

    for line in doc.lyric_lines:
        if not line.words:
            continue
        # keep 2 decimals for compatibility
        out.append(f"[{_fmt_lrc_time(line.start_ms)}]{line.text}")
    return "\n".join(out) + ("\n" if out else "")
