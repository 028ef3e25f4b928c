from __future__ import annotations

import json
import logging
import shutil
import threading
from pathlib import Path
from typing import Callable, Optional

from models import DEFAULT_CONFIG_DOCUMENT, DeployConfig, ProjectConfig


logger = logging.getLogger("commit-deploy.config")


class ProjectNotFoundError(LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"project not found: {name}")


class JsonProjectConfigRepository:
    """scripts.json-backed project configuration."""

    def __init__(
        self,
        path: Path | str,
        *,
        sample_path: Optional[Path | str] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.path = Path(path)
        self.sample_path = Path(sample_path) if sample_path else None
        self.on_change = on_change
        self._lock = threading.Lock()

    def _ensure_exists(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.sample_path and self.sample_path.is_file():
            shutil.copyfile(self.sample_path, self.path)
            logger.info("Sample config copied from %s to %s", self.sample_path, self.path)
            return
        if self.sample_path:
            logger.warning("Sample config not found at %s, using default config", self.sample_path)
        self.path.write_text(json.dumps(DEFAULT_CONFIG_DOCUMENT, indent=2), encoding="utf-8")

    def load(self) -> DeployConfig:
        with self._lock:
            self._ensure_exists()
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(raw, dict):
            raise ValueError(f"config root must be an object: {self.path}")
        return DeployConfig.model_validate({"projects": raw.get("projects") or []})

    def save(self, config: DeployConfig) -> DeployConfig:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(config.to_document(), indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        logger.info("Saved %d project(s) to %s", len(config.projects), self.path)
        if self.on_change is not None:
            self.on_change()
        return config

    def get_project(self, name: str) -> ProjectConfig:
        project = self.load().get_project(name)
        if project is None:
            raise ProjectNotFoundError(name)
        return project
