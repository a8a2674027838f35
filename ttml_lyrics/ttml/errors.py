class TtmlEncodeError(RuntimeError):
    """The lyric document breaks an assumption of the TTML writer."""
