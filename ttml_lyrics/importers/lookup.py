from __future__ import annotations

import logging
import re

from ttml_lyrics.lyric.model import LyricDocument, LyricLine, LyricWord
from ttml_lyrics.sources.types import LookupRecord

logger = logging.getLogger(__name__)

_LINE_TAG_RE = re.compile(r"\[[^\]]*\]")  # [mm:ss.xx], [ar:...]
_WORD_TAG_RE = re.compile(r"<[^>]*>")  # <mm:ss.xx>
_SPACES_RE = re.compile(r"\s+")
_NEWLINE_RE = re.compile(r"\r?\n")

WORD_SEPARATOR = "\\"
# a space wrapped in separators: splits into [.., " ", ..]
SPACE_MARKER = "\\ \\"
_PLACEHOLDER = "__TTML_LYRICS_ESC_SPACE__"


def strip_synced_lyrics(synced: str) -> str:
    cleaned = []
    for ln in _NEWLINE_RE.split(synced):
        ln = _LINE_TAG_RE.sub("", ln)
        ln = _WORD_TAG_RE.sub("", ln)
        cleaned.append(_SPACES_RE.sub(" ", ln).strip())
    return "\n".join(cleaned)


def preview_text(record: LookupRecord) -> str:
    """
    Plain lyrics verbatim when present, else synced lyrics without tags.

    An empty string means the record has no usable content.
    """
    if record.has_plain_lyrics:
        return record.plain_lyrics or ""
    if record.has_synced_lyrics:
        return strip_synced_lyrics(record.synced_lyrics or "")
    return ""


def escape_spaces(text: str) -> str:
    preserved = text.replace(SPACE_MARKER, _PLACEHOLDER)
    replaced = preserved.replace(" ", SPACE_MARKER)
    return replaced.replace(_PLACEHOLDER, SPACE_MARKER)


def import_preview(text: str) -> LyricDocument:
    lines = tuple(
        LyricLine(words=tuple(LyricWord(word=part) for part in ln.split(WORD_SEPARATOR)))
        for ln in _NEWLINE_RE.split(text)
    )
    return LyricDocument(lyric_lines=lines)


def import_lookup_result(record: LookupRecord, escape: bool = False) -> LyricDocument:
    text = preview_text(record)
    if not text.strip():
        logger.info("No lyrics content in lookup result %s", record.id)
        return LyricDocument()
    if escape:
        text = escape_spaces(text)
    doc = import_preview(text)
    logger.debug("Imported %d lines from lookup result %s", len(doc.lyric_lines), record.id)
    return doc
