from __future__ import annotations

import dataclasses
from collections import Counter
from typing import Iterable, Iterator, Optional


@dataclasses.dataclass(frozen=True)
class FileDiff:
    from_path: Optional[str]  # None: file did not exist before
    to_path: Optional[str]  # None: file does not exist after
    lines_removed: tuple[int, ...] = ()  # 1-based, original file
    lines_added: tuple[int, ...] = ()  # 1-based, new file


@dataclasses.dataclass(frozen=True)
class LineRange:
    """Half-open range of 1-based line numbers: [start, end)."""

    start: int
    end: int

    @property
    def count(self) -> int:
        return self.end - self.start

    def blame_arg(self) -> str:
        return f"{self.start},+{self.count}"


class AuthorTally:
    """
    Running count of blamed lines per author identity.

    Identities are the raw display names git reports; no normalization is done,
    so two spellings of the same person are counted separately.
    """

    def __init__(self, counts: dict[str, int] | None = None) -> None:
        self._counts: Counter[str] = Counter()
        for author, count in (counts or {}).items():
            self.add(author, count)

    def add(self, author: str, count: int = 1) -> None:
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        if count == 0:
            return
        self._counts[author] += count

    def update(self, other: "AuthorTally") -> None:
        for author, count in other.items():
            self.add(author, count)

    def items(self) -> Iterable[tuple[str, int]]:
        return self._counts.items()

    def ranked(self) -> list[tuple[str, int]]:
        # sorted() is stable: ties keep first-seen order
        return sorted(self._counts.items(), key=lambda kv: -kv[1])

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)

    def __getitem__(self, author: str) -> int:
        return self._counts.get(author, 0)

    def __contains__(self, author: object) -> bool:
        return author in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthorTally):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return f"AuthorTally({self.as_dict()!r})"
