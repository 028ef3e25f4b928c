from __future__ import annotations

from pathlib import Path


class DeployError(RuntimeError):
    """Base class for failures that abort a deploy."""


class RepositoryNotFoundError(DeployError):
    def __init__(self, repo_path: Path | str):
        self.repo_path = str(repo_path)
        super().__init__(f"Repository path does not exist: {repo_path}")


class MarkerFileMissingError(DeployError, FileNotFoundError):
    """Raised when the tracked marker file is absent from the working tree."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"{path.name} does not exist in repo")
