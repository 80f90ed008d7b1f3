import numpy as np

from data_structures import Span

CR = 13
LF = 10


def _line_break_mask(span: Span) -> np.ndarray:
    arr = np.frombuffer(span, dtype=np.uint8)
    return (arr == LF) | (arr == CR)


def strip_trailing_cr(span: Span) -> Span:
    """Drop a single trailing carriage return from a line-derived span."""
    if len(span) and span[-1] == CR:
        return span[:-1]
    return span


def strip_line_end(span: Span) -> Span:
    """Drop a trailing line feed and then a single trailing carriage return."""
    if len(span) and span[-1] == LF:
        span = span[:-1]
    return strip_trailing_cr(span)


def has_line_breaks(span: Span) -> bool:
    if not len(span):
        return False
    return bool(_line_break_mask(span).any())


def strip_whitespace(seq: Span) -> Span:
    """
    Join a wrapped residue body into one contiguous sequence.

    Single-line bodies come back untouched (still a zero-copy view), anything
    with interior line breaks is materialized into new bytes.
    """
    if not has_line_breaks(seq):
        return seq
    arr = np.frombuffer(seq, dtype=np.uint8)
    return arr[~_line_break_mask(seq)].tobytes()


def is_blank(span: Span) -> bool:
    """True when the span holds nothing but line terminators."""
    if not len(span):
        return True
    return bool(_line_break_mask(span).all())
