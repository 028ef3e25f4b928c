from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


def _default_data_dir() -> str:
    base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return str(Path(base) / "commit-deploy")


class Settings(BaseModel):
    """Runtime configuration resolved from environment variables."""

    data_dir: str = Field(
        default_factory=_default_data_dir,
        alias="COMMIT_DEPLOY_DATA_DIR",
        description="Directory holding the project config and deploy logs.",
    )
    log_dir: Optional[str] = Field(
        default=None,
        alias="COMMIT_DEPLOY_LOG_DIR",
        description="Directory for daily deploy-YYYY-MM-DD.log files. Defaults to <data_dir>/logs.",
    )
    config_path: Optional[str] = Field(
        default=None,
        alias="COMMIT_DEPLOY_CONFIG_PATH",
        description="Project configuration file. Defaults to <data_dir>/scripts.json.",
    )
    sample_config_path: Optional[str] = Field(
        default=None,
        alias="COMMIT_DEPLOY_SAMPLE_CONFIG_PATH",
        description="Sample scripts.json copied into place when no config exists yet.",
    )
    marker_file_name: str = Field(
        default="CICD.txt",
        alias="COMMIT_DEPLOY_MARKER_FILE",
        description="Tracked file at the repository root that records deploys.",
    )
    git_binary: str = Field(
        default="git",
        alias="COMMIT_DEPLOY_GIT_BINARY",
        description="Executable used for version-control commands.",
    )
    command_timeout: Optional[float] = Field(
        default=None,
        alias="COMMIT_DEPLOY_COMMAND_TIMEOUT",
        description="Seconds before a git command is killed. Unset means wait forever.",
    )
    log_level: str = Field(
        default="INFO",
        alias="COMMIT_DEPLOY_LOG_LEVEL",
        description="Level passed to logging.basicConfig.",
    )
    host: str = Field(default="127.0.0.1", alias="COMMIT_DEPLOY_HOST")
    port: int = Field(default=9001, alias="COMMIT_DEPLOY_PORT")

    model_config = {"populate_by_name": True}

    @property
    def resolved_log_dir(self) -> Path:
        return Path(self.log_dir) if self.log_dir else Path(self.data_dir) / "logs"

    @property
    def resolved_config_path(self) -> Path:
        return Path(self.config_path) if self.config_path else Path(self.data_dir) / "scripts.json"

    @classmethod
    def from_env(cls) -> "Settings":
        values = {key: value for key, value in os.environ.items() if value != ""}
        return cls.model_validate(values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance built from environment variables."""
    return Settings.from_env()
