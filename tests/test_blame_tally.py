from __future__ import annotations

from git_reviewers.blame import tally_blame
from git_reviewers.models import AuthorTally


def _porcelain_block(sha: str, line_no: int, author: str, content: str) -> list[str]:
    return [
        f"{sha} {line_no} {line_no} 1",
        f"author {author}",
        f"author-mail <{author.lower().replace(' ', '.')}@example.com>",
        "author-time 1700000000",
        "author-tz +0000",
        "committer Build Bot",
        "committer-mail <bot@example.com>",
        "committer-time 1700000000",
        "committer-tz +0000",
        "summary some change",
        "filename src/app.py",
        f"\t{content}",
    ]


def test_tally_counts_author_lines() -> None:
    lines: list[str] = []
    lines += _porcelain_block("a" * 40, 1, "Alice", "x = 1")
    lines += _porcelain_block("b" * 40, 2, "Bob", "author Mallory")
    lines += _porcelain_block("a" * 40, 3, "Alice", "y = 2")
    tally = tally_blame("\n".join(lines) + "\n", AuthorTally())
    assert tally.as_dict() == {"Alice": 2, "Bob": 1}


def test_tally_accumulates_and_returns_same_object() -> None:
    tally = AuthorTally()
    text = "\n".join(_porcelain_block("c" * 40, 1, "Carol Jones", "pass"))
    assert tally_blame(text, tally) is tally
    tally_blame(text, tally)
    assert tally["Carol Jones"] == 2
    assert len(tally) == 1


def test_tally_keeps_identities_verbatim() -> None:
    text = "author alice\nauthor Alice\nauthor  Alice\nauthor Not Committed Yet\n"
    tally = tally_blame(text, AuthorTally())
    assert tally.as_dict() == {"alice": 1, "Alice": 1, " Alice": 1, "Not Committed Yet": 1}


def test_tally_ignores_unlabelled_text() -> None:
    tally = tally_blame("author-mail <a@b>\nauthors x\n\n", AuthorTally())
    assert len(tally) == 0
