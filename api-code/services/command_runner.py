from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from models import CommandResult
from services.deploy_log import DeployLog
from services.errors import DeployError


logger = logging.getLogger("commit-deploy.command")

Command = Union[str, Sequence[str]]


class CommandExecutionError(DeployError):
    """Raised when a subprocess command fails."""

    def __init__(
        self,
        command: list[str],
        cwd: Optional[Path],
        returncode: Optional[int],
        stdout: str,
        stderr: str,
    ) -> None:
        self.command = command
        self.cwd = cwd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        message = stderr or stdout or f"return code {returncode}"
        super().__init__(f"command failed ({shlex.join(command)}): {message}")

    @property
    def output(self) -> str:
        return self.stderr or self.stdout or str(self)


class CommandRunner:
    """Runs one blocking command in a working directory and records it in a DeployLog."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    @staticmethod
    def _argv(command: Command) -> list[str]:
        if isinstance(command, str):
            return shlex.split(command)
        return [str(part) for part in command]

    def execute(self, command: Command, cwd: Path | str) -> str:
        """Run ``command`` and return trimmed stdout, raising CommandExecutionError on failure."""
        argv = self._argv(command)
        cwd_path = Path(cwd)
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                cwd=str(cwd_path),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise CommandExecutionError(argv, cwd_path, None, "", str(exc)) from exc

        stdout = (completed.stdout or "").strip()
        stderr = (completed.stderr or "").strip()
        if completed.returncode != 0:
            raise CommandExecutionError(argv, cwd_path, completed.returncode, stdout, stderr)
        return stdout

    def run(self, command: Command, cwd: Path | str, log: DeployLog) -> CommandResult:
        argv = self._argv(command)
        display = shlex.join(argv)
        log(f"$ {display}")
        try:
            output = self.execute(argv, cwd)
        except CommandExecutionError as exc:
            logger.debug("Command failed cwd=%s command=%s rc=%s", cwd, display, exc.returncode)
            log(f"❌ Error running: {display}")
            log(exc.output)
            return CommandResult(
                ok=False, output=exc.output, command=display, returncode=exc.returncode
            )

        if output:
            log(output)
        return CommandResult(ok=True, output=output, command=display, returncode=0)
