from __future__ import annotations


class ReviewersError(RuntimeError):
    pass


class GitCommandError(ReviewersError):
    def __init__(self, args: list[str], returncode: int | None, stderr: str = "", reason: str = "") -> None:
        self.cmd = list(args)
        self.returncode = returncode
        self.stderr = stderr
        what = reason or f"exited {returncode}"
        msg = f"git {' '.join(self.cmd)}: {what}"
        detail = stderr.strip()[:500]
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class DiffParseError(ReviewersError, ValueError):
    def __init__(self, line: str, lineno: int, reason: str = "unexpected line") -> None:
        self.line = line
        self.lineno = lineno
        super().__init__(f"diff parse error at line {lineno} ({reason}): {line!r}")


class ConfigError(ReviewersError, ValueError):
    pass
