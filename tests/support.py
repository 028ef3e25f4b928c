from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent
API_CODE_PATH = PROJECT_ROOT / "api-code"
if str(API_CODE_PATH) not in sys.path:
    sys.path.insert(0, str(API_CODE_PATH))

from services import CommandExecutionError, CommandRunner  # noqa: E402


GIT_AVAILABLE = shutil.which("git") is not None


class ScriptedRunner(CommandRunner):
    """CommandRunner that records git invocations instead of spawning them."""

    def __init__(
        self,
        *,
        current_branch: str = "main",
        fail_on: Optional[str] = None,
        raise_on: Optional[str] = None,
        branch_output: str = "",
    ) -> None:
        super().__init__()
        self.calls: list[list[str]] = []
        self.current_branch = current_branch
        self.fail_on = fail_on
        self.raise_on = raise_on
        self.branch_output = branch_output

    def subcommands(self) -> list[str]:
        return [call[0] for call in self.calls if call]

    def execute(self, command, cwd):  # type: ignore[override]
        argv = self._argv(command)
        args = argv[1:]
        self.calls.append(args)
        if args and args[0] == self.raise_on:
            raise ValueError(f"unexpected {args[0]} crash")
        if args and args[0] == self.fail_on:
            raise CommandExecutionError(argv, Path(cwd), 1, "", f"fatal: {args[0]} exploded")
        if args == ["rev-parse", "--abbrev-ref", "HEAD"]:
            return self.current_branch
        if args == ["branch", "-r"]:
            return self.branch_output
        return ""


def git(*args: str, cwd: Path) -> str:
    completed = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return completed.stdout.strip()


def make_remote_and_clone(root: Path, marker_content: str = "") -> tuple[Path, Path]:
    """Create a bare remote plus a working clone on ``main`` tracking it."""
    remote = root / "remote.git"
    work = root / "work"
    git("init", "--bare", str(remote), cwd=root)
    git("clone", str(remote), str(work), cwd=root)
    git("config", "user.email", "deployer@example.com", cwd=work)
    git("config", "user.name", "Deployer", cwd=work)
    git("config", "commit.gpgsign", "false", cwd=work)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=work)
    (work / "CICD.txt").write_text(marker_content, encoding="utf-8", newline="")
    git("add", "CICD.txt", cwd=work)
    git("commit", "-m", "init", cwd=work)
    git("push", "-u", "origin", "main", cwd=work)
    return remote, work
