from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from ttml_lyrics.lyric.model import LyricDocument, LyricLine, LyricWord

logger = logging.getLogger(__name__)


class ChannelMode(str, Enum):
    LYRIC = "lyric"
    LYRIC_TRANS = "lyric-trans"
    LYRIC_ROMAN = "lyric-roman"
    LYRIC_TRANS_ROMAN = "lyric-trans-roman"

    @property
    def channels(self) -> tuple[str, ...]:
        """Requested sub channels, in request order."""
        return _CHANNELS[self]


_CHANNELS: dict[ChannelMode, tuple[str, ...]] = {
    ChannelMode.LYRIC: (),
    ChannelMode.LYRIC_TRANS: ("translated_lyric",),
    ChannelMode.LYRIC_ROMAN: ("roman_lyric",),
    ChannelMode.LYRIC_TRANS_ROMAN: ("translated_lyric", "roman_lyric"),
}


class GroupingMode(str, Enum):
    INTERLEAVED = "interleaved-line"
    SAME_LINE_SEPARATOR = "same-line-separator"


@dataclass(frozen=True)
class TextImportConfig:
    channel_mode: ChannelMode = ChannelMode.LYRIC
    grouping_mode: GroupingMode = GroupingMode.INTERLEAVED
    line_separator: str = "|"  # same-line-separator only
    swap_translation_and_romanization: bool = False
    word_separator: str = "\\"
    prefix_markup_enabled: bool = False
    background_prefix: str = "<"
    duet_prefix: str = ">"
    empty_beat_enabled: bool = False
    empty_beat_symbol: str = "^"


@dataclass(frozen=True, slots=True)
class _Segment:
    orig: str
    translated_lyric: str = ""
    roman_lyric: str = ""


def _segments(raw_lines: list[str], cfg: TextImportConfig) -> list[_Segment]:
    channels = cfg.channel_mode.channels
    if not channels:
        return [_Segment(orig=raw) for raw in raw_lines]

    out: list[_Segment] = []
    if cfg.grouping_mode is GroupingMode.SAME_LINE_SEPARATOR:
        for raw in raw_lines:
            parts = raw.split(cfg.line_separator) if cfg.line_separator else [raw]
            subs = {name: (parts[i + 1] if i + 1 < len(parts) else "") for i, name in enumerate(channels)}
            out.append(_Segment(orig=parts[0], **subs))
        return out

    step = 1 + len(channels)
    for i in range(0, len(raw_lines), step):
        block = raw_lines[i : i + step]
        # short trailing block: missing channels become ""
        subs = {name: (block[j + 1] if j + 1 < len(block) else "") for j, name in enumerate(channels)}
        out.append(_Segment(orig=block[0], **subs))
    return out


def _strip_prefixes(text: str, cfg: TextImportConfig) -> tuple[str, bool, bool]:
    is_bg = False
    is_duet = False
    bg_prefix = cfg.background_prefix
    duet_prefix = cfg.duet_prefix
    while True:
        if bg_prefix and text.startswith(bg_prefix):
            is_bg = True
            text = text[len(bg_prefix) :]
        elif duet_prefix and text.startswith(duet_prefix):
            is_duet = True
            text = text[len(duet_prefix) :]
        else:
            return text, is_bg, is_duet


def _split_words(text: str, separator: str) -> tuple[LyricWord, ...]:
    if not separator:
        return (LyricWord(word=text),)
    return tuple(LyricWord(word=part) for part in text.split(separator))


def _fold_empty_beats(word: LyricWord, symbol: str) -> LyricWord:
    text = word.word
    beats = 0
    while text.endswith(symbol):
        text = text[: -len(symbol)]
        beats += 1
    if not beats:
        return word
    return replace(word, word=text, empty_beat=word.empty_beat + beats)


def import_plain_text(text: str, config: TextImportConfig | None = None) -> LyricDocument:
    """
    Build lyric lines from plain text.

    Steps, in order:
    - split into raw lines and group sub channels (interleaved / same line)
    - strip background / duet prefixes (repeatable, additive)
    - swap translation and romanization
    - split words on the word separator
    - fold trailing empty beat symbols into the word's beat count

    Short or malformed input never raises; missing parts become "".
    """
    cfg = config or TextImportConfig()
    raw_lines = text.split("\n")

    lines: list[LyricLine] = []
    for seg in _segments(raw_lines, cfg):
        orig = seg.orig
        is_bg = is_duet = False
        if cfg.prefix_markup_enabled:
            orig, is_bg, is_duet = _strip_prefixes(orig, cfg)
        lines.append(
            LyricLine(
                words=(LyricWord(word=orig),),
                translated_lyric=seg.translated_lyric,
                roman_lyric=seg.roman_lyric,
                is_bg=is_bg,
                is_duet=is_duet,
            )
        )

    if cfg.swap_translation_and_romanization:
        lines = [replace(ln, translated_lyric=ln.roman_lyric, roman_lyric=ln.translated_lyric) for ln in lines]

    if cfg.word_separator:
        lines = [replace(ln, words=_split_words(ln.text, cfg.word_separator)) for ln in lines]

    if cfg.empty_beat_enabled and cfg.empty_beat_symbol:
        symbol = cfg.empty_beat_symbol
        lines = [replace(ln, words=tuple(_fold_empty_beats(w, symbol) for w in ln.words)) for ln in lines]

    logger.debug(
        "Imported %d lines from plain text (mode=%s, grouping=%s)",
        len(lines),
        cfg.channel_mode.value,
        cfg.grouping_mode.value,
    )
    return LyricDocument(lyric_lines=tuple(lines))
