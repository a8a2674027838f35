from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class LyricWord:
    word: str = ""
    start_ms: int = 0
    end_ms: int = 0
    empty_beat: int = 0
    obscene: bool = False
    id: str = field(default_factory=new_id, compare=False)

    @property
    def is_blank(self) -> bool:
        return not self.word.strip()


@dataclass(frozen=True, slots=True)
class LyricLine:
    """
    A line of lyric words in performance order.

    A line without words is a paragraph separator and is never rendered.
    Background lines annotate the primary line right before them.
    """

    words: tuple[LyricWord, ...] = ()
    start_ms: int = 0
    end_ms: int = 0
    translated_lyric: str = ""
    roman_lyric: str = ""
    is_bg: bool = False
    is_duet: bool = False
    ignore_sync: bool = False
    id: str = field(default_factory=new_id, compare=False)

    @property
    def text(self) -> str:
        return "".join(w.word for w in self.words)

    @property
    def non_blank_words(self) -> tuple[LyricWord, ...]:
        return tuple(w for w in self.words if not w.is_blank)


@dataclass(frozen=True, slots=True)
class LyricMetadata:
    key: str
    value: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LyricDocument:
    lyric_lines: tuple[LyricLine, ...] = ()
    metadata: tuple[LyricMetadata, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not any(line.non_blank_words for line in self.lyric_lines)
