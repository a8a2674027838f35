"""
Export a lyric document to TTML (Apple Music / AMLL flavoured).

Document level facts are inferred from the words:
- itunes:timing: Word when some line has 2+ non-blank words, Line when every
  line has at most one, None when nothing is timed
- xml:lang: "language" metadata, else the caller's fallback language
- agents: v1 always, v2 when any line is a duet

Background lines are folded into the primary line right before them.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from ttml_lyrics.lyric.model import LyricDocument, LyricLine, LyricMetadata, LyricWord
from ttml_lyrics.lyric.timestamp import ms_to_timestamp

from .errors import TtmlEncodeError

logger = logging.getLogger(__name__)

NS_TTML = "http://www.w3.org/ns/ttml"
NS_TTM = "http://www.w3.org/ns/ttml#metadata"
NS_AMLL = "http://www.example.com/ns/amll"
NS_ITUNES = "http://music.apple.com/lyric-ttml-internal"

TRANSLATION_LANG = "zh-CN"

_ISO_639_1 = ("zh", "en", "ja", "ko", "fr", "de", "es", "pt", "ru")


class TimingMode(str, Enum):
    WORD = "Word"
    LINE = "Line"
    NONE = "None"


@dataclass(frozen=True, slots=True)
class _LineGroup:
    line: LyricLine
    bg: LyricLine | None = None


def _ts(ms: int) -> str:
    return ms_to_timestamp(ms, precise=True)


def split_paragraphs(lines: Iterable[LyricLine]) -> list[list[LyricLine]]:
    """Split lines into paragraphs at word-less separator lines."""
    params: list[list[LyricLine]] = []
    tmp: list[LyricLine] = []
    for line in lines:
        if not line.words:
            if tmp:
                params.append(tmp)
                tmp = []
            continue
        tmp.append(line)
    if tmp:
        params.append(tmp)
    return params


def pair_background_lines(param: Sequence[LyricLine]) -> list[_LineGroup]:
    out: list[_LineGroup] = []
    i = 0
    while i < len(param):
        line = param[i]
        nxt = param[i + 1] if i + 1 < len(param) else None
        if nxt is not None and nxt.is_bg:
            out.append(_LineGroup(line=line, bg=nxt))
            i += 2
        else:
            out.append(_LineGroup(line=line))
            i += 1
    return out


def infer_timing_mode(lines: Sequence[LyricLine]) -> TimingMode:
    counts = [len(line.non_blank_words) for line in lines]
    has_timing = any(w.end_ms > w.start_ms for line in lines for w in line.non_blank_words)
    if sum(counts) == 0 or not has_timing:
        return TimingMode.NONE
    if any(c > 1 for c in counts):
        return TimingMode.WORD
    return TimingMode.LINE


def to_iso639_1(lang: str) -> str:
    lower = lang.lower()
    for code in _ISO_639_1:
        if lower.startswith(code):
            return code
    return lower[:2] or "en"


def infer_language(metadata: Sequence[LyricMetadata], fallback_language: str | None = None) -> str:
    language = next((m for m in metadata if m.key == "language"), None)
    raw = None
    if language is not None:
        raw = next((v for v in language.value if v.strip()), None)
    return to_iso639_1(raw or fallback_language or "en")


def _append_text(parent: ET.Element, text: str) -> None:
    if not text:
        return
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def _word_span(parent: ET.Element, word: LyricWord) -> ET.Element:
    span = ET.SubElement(parent, "span", {"begin": _ts(word.start_ms), "end": _ts(word.end_ms)})
    if word.obscene:
        span.set("amll:obscene", "true")
    if word.empty_beat:
        span.set("amll:empty-beat", str(word.empty_beat))
    span.text = word.word
    return span


def _role_span(parent: ET.Element, role: str, text: str, lang: str | None = None) -> None:
    span = ET.SubElement(parent, "span", {"ttm:role": role})
    if lang:
        span.set("xml:lang", lang)
    span.text = text


def _annotations(parent: ET.Element, line: LyricLine) -> None:
    if line.translated_lyric:
        _role_span(parent, "x-translation", line.translated_lyric, TRANSLATION_LANG)
    if line.roman_lyric:
        _role_span(parent, "x-roman", line.roman_lyric)


def _first_word(line: LyricLine) -> LyricWord:
    if not line.words:
        raise TtmlEncodeError(f"Line {line.id} has no words")
    return line.words[0]


def _build_metadata(head: ET.Element, doc: LyricDocument) -> None:
    metadata_el = ET.SubElement(head, "metadata")
    ET.SubElement(metadata_el, "ttm:agent", {"type": "person", "xml:id": "v1"})
    if any(line.is_duet for line in doc.lyric_lines):
        ET.SubElement(metadata_el, "ttm:agent", {"type": "other", "xml:id": "v2"})

    songwriter = next(
        (m for m in doc.metadata if m.key == "songwriter" and any(v.strip() for v in m.value)),
        None,
    )
    if songwriter is not None:
        itunes_el = ET.SubElement(metadata_el, "iTunesMetadata", {"xmlns": NS_ITUNES, "leadingSilence": "0"})
        ET.SubElement(itunes_el, "translations")
        songwriters_el = ET.SubElement(itunes_el, "songwriters")
        for name in songwriter.value:
            if name.strip():
                ET.SubElement(songwriters_el, "songwriter").text = name.strip()

    for meta in doc.metadata:
        if meta.key == "songwriter" or not any(v.strip() for v in meta.value):
            continue
        for value in meta.value:
            ET.SubElement(metadata_el, "amll:meta", {"key": meta.key, "value": value})


def _build_line(parent: ET.Element, group: _LineGroup, key: int, mode: TimingMode) -> None:
    line = group.line
    line_p = ET.SubElement(
        parent,
        "p",
        {
            "begin": _ts(line.start_ms),
            "end": _ts(line.end_ms),
            "ttm:agent": "v2" if line.is_duet else "v1",
            "itunes:key": f"L{key}",
        },
    )

    if mode is TimingMode.WORD:
        for word in line.words:
            if word.is_blank:
                _append_text(line_p, word.word)
            else:
                _word_span(line_p, word)
    else:
        word = _first_word(line)
        line_p.text = word.word
        line_p.set("begin", _ts(word.start_ms))
        line_p.set("end", _ts(word.end_ms))

    if group.bg is not None:
        _build_bg_line(line_p, group.bg, mode)

    _annotations(line_p, line)


def _build_bg_line(line_p: ET.Element, bg: LyricLine, mode: TimingMode) -> None:
    bg_span = ET.SubElement(line_p, "span", {"ttm:role": "x-bg"})

    if mode is TimingMode.WORD:
        timed = bg.non_blank_words
        if not timed:
            raise TtmlEncodeError(f"Background line {bg.id} has no non-blank words")
        indexes = [i for i, w in enumerate(bg.words) if not w.is_blank]
        for i, word in enumerate(bg.words):
            if word.is_blank:
                _append_text(bg_span, word.word)
                continue
            span = _word_span(bg_span, word)
            if i == indexes[0]:
                span.text = "(" + (span.text or "")
            if i == indexes[-1]:
                span.text = (span.text or "") + ")"
        # own words decide the span time, unlike the primary line
        bg_span.set("begin", _ts(min(w.start_ms for w in timed)))
        bg_span.set("end", _ts(max(w.end_ms for w in timed)))
    else:
        word = _first_word(bg)
        bg_span.text = f"({word.word})"
        bg_span.set("begin", _ts(word.start_ms))
        bg_span.set("end", _ts(word.end_ms))

    _annotations(bg_span, bg)


def build_ttml(doc: LyricDocument, fallback_language: str | None = None) -> ET.Element:
    lines = doc.lyric_lines
    mode = infer_timing_mode(lines)
    lang = infer_language(doc.metadata, fallback_language)

    tt = ET.Element(
        "tt",
        {
            "xmlns": NS_TTML,
            "xmlns:ttm": NS_TTM,
            "xmlns:amll": NS_AMLL,
            "xmlns:itunes": NS_ITUNES,
            "itunes:timing": mode.value,
            "xml:lang": lang,
        },
    )
    head = ET.SubElement(tt, "head")
    _build_metadata(head, doc)

    body = ET.SubElement(tt, "body", {"dur": _ts(lines[-1].end_ms if lines else 0)})
    key = 0
    for param in split_paragraphs(lines):
        div = ET.SubElement(body, "div", {"begin": _ts(param[0].start_ms), "end": _ts(param[-1].end_ms)})
        for group in pair_background_lines(param):
            key += 1
            _build_line(div, group, key, mode)

    logger.debug("TTML document built: timing=%s lang=%s lines=%d", mode.value, lang, len(lines))
    return tt


def export_ttml(doc: LyricDocument, fallback_language: str | None = None, pretty: bool = False) -> str:
    tt = build_ttml(doc, fallback_language)
    if pretty:
        ET.indent(tt, space="  ")
    return ET.tostring(tt, encoding="unicode")
