from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional

from .blame import tally_blame
from .context import DEFAULT_RADIUS, context_window, count_lines
from .diff_parse import parse_diff
from .git import blame_lines, diff_against_merge_base, get_merge_base, get_repo_toplevel
from .models import AuthorTally, FileDiff, LineRange
from .ranges import contiguous_ranges

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class BlameQuery:
    path: Path
    ranges: tuple[LineRange, ...]
    revision: Optional[str]  # None: working tree

    @property
    def line_count(self) -> int:
        return sum(r.count for r in self.ranges)


def _regular_file(toplevel: Path, rel: str) -> Optional[Path]:
    p = toplevel / rel
    # Submodules show up as directories; deleted or renamed-away files do not exist.
    # git blames a symlink as its one-line target path, not the target's content.
    if p.is_symlink() or not p.is_file():
        logger.debug("skipping %s: not a regular file", p)
        return None
    return p


def removed_line_queries(file_diffs: list[FileDiff], toplevel: Path, merge_base: str) -> list[BlameQuery]:
    queries: list[BlameQuery] = []
    for fd in file_diffs:
        if fd.from_path is None:
            continue
        path = _regular_file(toplevel, fd.from_path)
        if path is None or not fd.lines_removed:
            continue
        ranges = contiguous_ranges(sorted(set(fd.lines_removed)))
        queries.append(BlameQuery(path=path, ranges=tuple(ranges), revision=merge_base))
    return queries


def context_line_queries(file_diffs: list[FileDiff], toplevel: Path, radius: int = DEFAULT_RADIUS) -> list[BlameQuery]:
    queries: list[BlameQuery] = []
    for fd in file_diffs:
        if fd.to_path is None:
            continue
        path = _regular_file(toplevel, fd.to_path)
        if path is None:
            continue
        window = context_window(count_lines(path), fd.lines_added, radius=radius)
        if not window:
            continue
        queries.append(BlameQuery(path=path, ranges=tuple(contiguous_ranges(window)), revision=None))
    return queries


def plan_queries(
    file_diffs: list[FileDiff],
    toplevel: Path,
    merge_base: str,
    radius: int = DEFAULT_RADIUS,
) -> list[BlameQuery]:
    removed = removed_line_queries(file_diffs, toplevel, merge_base)
    context = context_line_queries(file_diffs, toplevel, radius=radius)
    logger.info(
        "%d file(s) in diff: %d removed-line quer%s, %d context quer%s",
        len(file_diffs),
        len(removed),
        "y" if len(removed) == 1 else "ies",
        len(context),
        "y" if len(context) == 1 else "ies",
    )
    return removed + context


def run_query(query: BlameQuery, toplevel: Path, timeout_s: Optional[float] = None) -> AuthorTally:
    blame = blame_lines(query.path, list(query.ranges), cwd=toplevel, revision=query.revision, timeout_s=timeout_s)
    return tally_blame(blame, AuthorTally())


def run_queries(
    queries: list[BlameQuery],
    toplevel: Path,
    *,
    jobs: int = 1,
    timeout_s: Optional[float] = None,
) -> AuthorTally:
    """
    Blame every query and merge the per-query tallies. Each worker fills its own
    tally; only this thread touches the merged one. Merging follows query order so
    authors with equal counts always rank the same way.
    """
    tally = AuthorTally()
    if not queries:
        return tally
    parts: dict[int, AuthorTally] = {}
    with ThreadPoolExecutor(max_workers=max(1, jobs)) as ex:
        futs = {ex.submit(run_query, q, toplevel, timeout_s): i for i, q in enumerate(queries)}
        for fut in as_completed(futs):
            i = futs[fut]
            q = queries[i]
            parts[i] = fut.result()
            logger.debug("blamed %d line(s) of %s at %s", q.line_count, q.path, q.revision or "working tree")
    for i in range(len(queries)):
        tally.update(parts[i])
    return tally


def find_reviewers(
    base: str,
    *,
    cwd: Path,
    radius: int = DEFAULT_RADIUS,
    jobs: int = 1,
    timeout_s: Optional[float] = None,
    toplevel: Optional[Path] = None,
) -> AuthorTally:
    if toplevel is None:
        toplevel = get_repo_toplevel(cwd, timeout_s=timeout_s)
    merge_base = get_merge_base(base, cwd=toplevel, timeout_s=timeout_s)
    logger.info("merge base of %s and HEAD: %s", base, merge_base)
    diff = diff_against_merge_base(base, cwd=toplevel, timeout_s=timeout_s)
    file_diffs = parse_diff(diff)
    queries = plan_queries(file_diffs, toplevel, merge_base, radius=radius)
    return run_queries(queries, toplevel, jobs=jobs, timeout_s=timeout_s)


def format_tally(tally: AuthorTally) -> list[str]:
    return [f"{author}: {count}" for author, count in tally.ranked()]
