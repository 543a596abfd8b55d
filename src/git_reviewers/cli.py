from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import resolve_config
from .errors import ReviewersError
from .git import get_repo_toplevel
from .logs import setup_logging
from .reviewers import find_reviewers, format_tally


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-reviewers",
        description="Rank the authors of the code touched by HEAD relative to its merge base with BASE.",
    )
    parser.add_argument(
        "base",
        nargs="?",
        default=None,
        help="Revision to compare against (default: config `base`, else master).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)

    try:
        cwd = Path.cwd()
        toplevel = get_repo_toplevel(cwd)
        config = resolve_config(toplevel)
        setup_logging(config.log_level)
        tally = find_reviewers(
            args.base or config.base,
            cwd=cwd,
            radius=config.context_radius,
            jobs=config.jobs,
            timeout_s=config.git_timeout_s,
            toplevel=toplevel,
        )
    except (ReviewersError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    lines = format_tally(tally)
    if lines:
        print("\n".join(lines))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
