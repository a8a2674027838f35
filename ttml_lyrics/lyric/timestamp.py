from __future__ import annotations

import re

_CLOCK_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2})(?:\.(\d{1,3}))?$")  # [hh:]mm:ss[.fff]


class TimestampError(ValueError):
    pass


def ms_to_timestamp(ms: int, precise: bool = True) -> str:
    """
    mm:ss.fff, or hh:mm:ss.fff from one hour on.

    With precise=False the fraction is truncated to centiseconds (LRC style).
    """
    ms = max(int(ms), 0)
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    frac = f"{ms2:03d}" if precise else f"{ms2 // 10:02d}"
    if h:
        return f"{h:02d}:{m:02d}:{s:02d}.{frac}"
    return f"{m:02d}:{s:02d}.{frac}"


def timestamp_to_ms(text: str) -> int:
    match = _CLOCK_RE.match(text.strip())
    if not match:
        raise TimestampError(f"Invalid timestamp: {text!r}")
    hours, minutes, seconds, frac = match.groups()
    h = int(hours) if hours is not None else 0
    m = int(minutes)
    s = int(seconds)
    if not (0 <= s <= 59):
        raise TimestampError(f"Invalid seconds: {s}")
    if hours is not None and not (0 <= m <= 59):
        raise TimestampError(f"Invalid minutes: {m}")
    # "5" -> 500ms, "23" -> 230ms, "234" -> 234ms
    ms = int(frac.ljust(3, "0")) if frac else 0
    return ((h * 60 + m) * 60 + s) * 1000 + ms
