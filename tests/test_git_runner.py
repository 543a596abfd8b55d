from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from git_reviewers.errors import GitCommandError
from git_reviewers.git import blame_lines, diff_against_merge_base, git_output, run_git
from git_reviewers.models import LineRange


def _install_fake_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, body: list[str]) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    fake_git = bin_dir / "git"
    fake_git.write_text(
        "\n".join(
            [
                "#!/usr/bin/env python3",
                "import json",
                "import sys",
                "",
                "def main() -> int:",
                "    args = sys.argv[1:]",
                *[f"    {line}" for line in body],
                "",
                "if __name__ == '__main__':",
                "    raise SystemExit(main())",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    fake_git.chmod(0o755)
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))
    return bin_dir


def _echo_args_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_git(tmp_path, monkeypatch, ["sys.stdout.write(json.dumps(args))", "return 0"])


def test_git_output_raises_on_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_git(
        tmp_path,
        monkeypatch,
        ["sys.stderr.write('fatal: bad revision\\n')", "return 128"],
    )
    with pytest.raises(GitCommandError) as excinfo:
        git_output(["merge-base", "nope", "HEAD"], cwd=tmp_path)
    err = excinfo.value
    assert err.returncode == 128
    assert "fatal: bad revision" in err.stderr
    assert "merge-base nope HEAD" in str(err)


def test_run_git_reports_code_without_raising(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_git(tmp_path, monkeypatch, ["sys.stdout.write('out')", "sys.stderr.write('err')", "return 3"])
    assert run_git(["status"], cwd=tmp_path) == (3, "out", "err")


def test_large_output_on_both_pipes_does_not_deadlock(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_git(
        tmp_path,
        monkeypatch,
        [
            "for i in range(20000):",
            "    sys.stdout.write('author A\\n')",
            "    sys.stderr.write('E' * 100)",
            "return 0",
        ],
    )
    out = git_output(["blame"], cwd=tmp_path, timeout_s=60)
    assert out.count("author A\n") == 20000


def test_missing_git_binary(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    with pytest.raises(GitCommandError) as excinfo:
        git_output(["status"], cwd=tmp_path)
    assert excinfo.value.returncode is None


def test_timeout_is_a_git_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_git(tmp_path, monkeypatch, ["import time", "time.sleep(30)", "return 0"])
    with pytest.raises(GitCommandError) as excinfo:
        git_output(["blame"], cwd=tmp_path, timeout_s=0.5)
    assert "timed out" in str(excinfo.value)


def test_blame_command_line(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _echo_args_git(tmp_path, monkeypatch)
    target = tmp_path / "src" / "f.py"

    at_rev = json.loads(blame_lines(target, [LineRange(3, 5), LineRange(9, 10)], cwd=tmp_path, revision="abc123"))
    assert at_rev == [
        "--no-pager",
        "blame",
        "--line-porcelain",
        "-w",
        "-L",
        "3,+2",
        "-L",
        "9,+1",
        "abc123",
        "--",
        str(target),
    ]

    worktree = json.loads(blame_lines(target, [LineRange(1, 2)], cwd=tmp_path))
    assert worktree[-3:] == ["1,+1", "--", str(target)]


def test_diff_command_uses_custom_markers(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _echo_args_git(tmp_path, monkeypatch)
    args = json.loads(diff_against_merge_base("main", cwd=tmp_path))
    diff_at = args.index("diff")
    assert args[:diff_at] == [
        "--no-pager",
        "-c",
        "diff.suppressBlankEmpty=false",
        "-c",
        "core.quotePath=true",
    ]
    assert "--output-indicator-new=N" in args
    assert "--output-indicator-old=O" in args
    assert args[-3:] == ["--merge-base", "main", "HEAD"]
