from __future__ import annotations

from .models import AuthorTally

AUTHOR_LABEL = "author "


def tally_blame(blame: str, tally: AuthorTally) -> AuthorTally:
    """
    Count `git blame --line-porcelain` output into `tally`.

    Every blamed line carries its own `author <name>` header, so each occurrence is
    one line attributed to that author. `author-mail`, `author-time` and the
    tab-prefixed content lines do not start with the label and are skipped.
    """
    for line in blame.split("\n"):
        if line.startswith(AUTHOR_LABEL):
            tally.add(line[len(AUTHOR_LABEL) :])
    return tally
