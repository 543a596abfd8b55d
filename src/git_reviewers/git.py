from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from .diff_parse import ADDED_MARKER, REMOVED_MARKER
from .errors import GitCommandError
from .models import LineRange
from .ranges import blame_range_args

logger = logging.getLogger(__name__)


def run_git(args: list[str], cwd: Path, timeout_s: Optional[float] = None) -> tuple[int, str, str]:
    # subprocess.run drains stdout and stderr together, so neither pipe can fill up
    # and stall git while we wait for it to exit.
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        proc = subprocess.run(
            ["git", "--no-pager", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_s,
        )
    except subprocess.TimeoutExpired as e:
        raise GitCommandError(args, None, reason=f"timed out after {timeout_s}s") from e
    except OSError as e:
        raise GitCommandError(args, None, reason=f"failed to start git: {e}") from e
    return proc.returncode, proc.stdout, proc.stderr


def git_output(args: list[str], cwd: Path, timeout_s: Optional[float] = None) -> str:
    code, out, err = run_git(args, cwd=cwd, timeout_s=timeout_s)
    if code != 0:
        raise GitCommandError(args, code, err)
    return out


def get_repo_toplevel(cwd: Path, timeout_s: Optional[float] = None) -> Path:
    out = git_output(["rev-parse", "--show-toplevel"], cwd=cwd, timeout_s=timeout_s)
    return Path(out.strip()).resolve()


def get_merge_base(base: str, cwd: Path, timeout_s: Optional[float] = None) -> str:
    out = git_output(["merge-base", base, "HEAD"], cwd=cwd, timeout_s=timeout_s)
    return out.strip()


def diff_against_merge_base(base: str, cwd: Path, timeout_s: Optional[float] = None) -> str:
    # Pin config that changes the diff grammar: unmarked empty context lines, and
    # raw (possibly non-UTF-8) path bytes instead of C-quoted names.
    return git_output(
        [
            "-c",
            "diff.suppressBlankEmpty=false",
            "-c",
            "core.quotePath=true",
            "diff",
            "--no-color",
            "--no-ext-diff",
            "--src-prefix=a/",
            "--dst-prefix=b/",
            f"--output-indicator-new={ADDED_MARKER}",
            f"--output-indicator-old={REMOVED_MARKER}",
            "--merge-base",
            base,
            "HEAD",
        ],
        cwd=cwd,
        timeout_s=timeout_s,
    )


def blame_lines(
    path: Path,
    ranges: list[LineRange],
    cwd: Path,
    revision: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> str:
    """
    `git blame --line-porcelain -w` restricted to `ranges` of `path`, at `revision`
    or against the working tree when no revision is given.
    """
    args = ["blame", "--line-porcelain", "-w", *blame_range_args(ranges)]
    if revision:
        args.append(revision)
    args += ["--", str(path)]
    return git_output(args, cwd=cwd, timeout_s=timeout_s)
