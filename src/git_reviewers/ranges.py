from __future__ import annotations

from typing import Iterable

from .models import LineRange


def contiguous_ranges(values: Iterable[int]) -> list[LineRange]:
    """
    Collapse ascending line numbers into half-open contiguous ranges.

    The input must already be sorted; a value only extends the open range when it
    equals that range's end, so out-of-order or repeated values start a new range.
    """
    ranges: list[LineRange] = []
    start: int | None = None
    end = 0
    for v in values:
        if start is not None and v == end:
            end += 1
            continue
        if start is not None:
            ranges.append(LineRange(start, end))
        start, end = v, v + 1
    if start is not None:
        ranges.append(LineRange(start, end))
    return ranges


def blame_range_args(ranges: Iterable[LineRange]) -> list[str]:
    args: list[str] = []
    for r in ranges:
        args += ["-L", r.blame_arg()]
    return args
