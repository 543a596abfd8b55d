"""
Parse `git diff` output into per-file lists of removed and added line numbers.

The diff is expected to be produced with custom content markers
(`--output-indicator-new=N --output-indicator-old=O`) so content lines can never
be mistaken for `---`/`+++` headers.
"""
from __future__ import annotations

import dataclasses
import enum
import re
from typing import Optional

from .errors import DiffParseError
from .models import FileDiff

ADDED_MARKER = "N"
REMOVED_MARKER = "O"
CONTEXT_MARKER = " "

DEV_NULL = "/dev/null"

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@.*$")

_MODE_PREFIXES = ("old mode ", "new mode ", "new file mode ", "deleted file mode ")

_C_ESCAPES = {
    "a": b"\a",
    "b": b"\b",
    "t": b"\t",
    "n": b"\n",
    "v": b"\v",
    "f": b"\f",
    "r": b"\r",
    '"': b'"',
    "\\": b"\\",
}


class LineKind(enum.Enum):
    SECTION_START = "section_start"
    INDEX_META = "index_meta"
    MODE_META = "mode_meta"
    FROM_HEADER = "from_header"
    TO_HEADER = "to_header"
    HUNK_HEADER = "hunk_header"
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"
    BLANK = "blank"


def classify_line(line: str) -> LineKind:
    """
    Classify one line of diff output.

    Extended headers we have no use for (`index`, `similarity index`, `rename from`,
    `Binary files ... differ`, `\\ No newline at end of file`, ...) all come back as
    INDEX_META.
    """
    if not line:
        return LineKind.BLANK
    first = line[0]
    if first == ADDED_MARKER:
        return LineKind.ADDED
    if first == REMOVED_MARKER:
        return LineKind.REMOVED
    if first == CONTEXT_MARKER:
        return LineKind.CONTEXT
    if line.startswith("diff "):
        return LineKind.SECTION_START
    if line.startswith(_MODE_PREFIXES):
        return LineKind.MODE_META
    if line.startswith("--- "):
        return LineKind.FROM_HEADER
    if line.startswith("+++ "):
        return LineKind.TO_HEADER
    if line.startswith("@@"):
        return LineKind.HUNK_HEADER
    return LineKind.INDEX_META


def unquote_path(raw: str) -> str:
    """Undo git's C-style quoting of unusual path names (`"a/sp\\303\\251cial"`)."""
    if len(raw) < 2 or not (raw.startswith('"') and raw.endswith('"')):
        return raw
    body = raw[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        c = body[i]
        if c != "\\":
            out += c.encode("utf-8")
            i += 1
            continue
        esc = body[i + 1 : i + 2]
        if esc and esc in "01234567":
            digits = body[i + 1 : i + 4]
            if len(digits) != 3 or any(d not in "01234567" for d in digits):
                raise ValueError(f"bad octal escape in quoted path: {raw!r}")
            out.append(int(digits, 8))
            i += 4
        elif esc in _C_ESCAPES:
            out += _C_ESCAPES[esc]
            i += 2
        else:
            raise ValueError(f"bad escape in quoted path: {raw!r}")
    return out.decode("utf-8", errors="surrogateescape")


def parse_header_path(line: str, lineno: int, *, marker: str, prefix: str) -> Optional[str]:
    """
    Parse a `--- a/<path>` or `+++ b/<path>` header; `/dev/null` yields None.
    """
    rest = line[len(marker) + 1 :]
    # git appends a tab to names containing spaces, for the benefit of patch(1)
    if rest.endswith("\t"):
        rest = rest[:-1]
    if rest == DEV_NULL:
        return None
    try:
        name = unquote_path(rest)
    except ValueError as e:
        raise DiffParseError(line, lineno, str(e)) from e
    if not name.startswith(prefix) or len(name) == len(prefix):
        raise DiffParseError(line, lineno, f"expected {marker} {prefix}<path> or {marker} {DEV_NULL}")
    return name[len(prefix) :]


def parse_hunk_header(line: str, lineno: int) -> tuple[int, int]:
    m = _HUNK_RE.match(line)
    if m is None:
        raise DiffParseError(line, lineno, "malformed hunk header")
    return int(m.group(1)), int(m.group(2))


@dataclasses.dataclass
class _Section:
    from_path: Optional[str] = None
    to_path: Optional[str] = None
    lines_removed: list[int] = dataclasses.field(default_factory=list)
    lines_added: list[int] = dataclasses.field(default_factory=list)

    def freeze(self) -> FileDiff:
        return FileDiff(
            from_path=self.from_path,
            to_path=self.to_path,
            lines_removed=tuple(self.lines_removed),
            lines_added=tuple(self.lines_added),
        )


def parse_diff(diff: str) -> list[FileDiff]:
    sections: list[_Section] = []
    current: _Section | None = None
    in_hunk = False
    line_from = 0
    line_to = 0

    for lineno, line in enumerate(diff.split("\n"), start=1):
        kind = classify_line(line)
        if kind is LineKind.BLANK and in_hunk:
            # diff.suppressBlankEmpty drops the marker of empty context lines
            kind = LineKind.CONTEXT
        if kind in (LineKind.BLANK, LineKind.INDEX_META, LineKind.MODE_META):
            continue
        if kind is LineKind.SECTION_START:
            current = _Section()
            sections.append(current)
            in_hunk = False
            continue
        if current is None:
            raise DiffParseError(line, lineno, "content before the first file section")

        if kind is LineKind.FROM_HEADER:
            current.from_path = parse_header_path(line, lineno, marker="---", prefix="a/")
        elif kind is LineKind.TO_HEADER:
            current.to_path = parse_header_path(line, lineno, marker="+++", prefix="b/")
        elif kind is LineKind.HUNK_HEADER:
            line_from, line_to = parse_hunk_header(line, lineno)
            in_hunk = True
        elif not in_hunk:
            raise DiffParseError(line, lineno, "content line outside a hunk")
        elif kind is LineKind.ADDED:
            current.lines_added.append(line_to)
            line_to += 1
        elif kind is LineKind.REMOVED:
            current.lines_removed.append(line_from)
            line_from += 1
        else:
            line_from += 1
            line_to += 1

    return [s.freeze() for s in sections]
