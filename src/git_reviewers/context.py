from __future__ import annotations

from pathlib import Path
from typing import Iterable

DEFAULT_RADIUS = 2


def count_lines(path: Path) -> int:
    """
    Number of lines in `path` as git blame sees them: a trailing newline does not
    start another line, an unterminated last line still counts.
    """
    data = path.read_bytes()
    if not data:
        return 0
    n = data.count(b"\n")
    if not data.endswith(b"\n"):
        n += 1
    return n


def context_window(num_lines: int, lines_added: Iterable[int], radius: int = DEFAULT_RADIUS) -> list[int]:
    """
    Lines within `radius` of any added line, clipped to the file, excluding the
    added lines themselves. Sorted ascending.
    """
    if radius < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")
    added = set(lines_added)
    window: set[int] = set()
    for line in added:
        lo = max(1, line - radius)
        hi = min(num_lines, line + radius)
        window.update(range(lo, hi + 1))
    window -= added
    return sorted(window)
