from __future__ import annotations

from typing import Callable, Optional

from models import DeployConfig, ProjectConfig
from repositories.project_config import ProjectNotFoundError


class InMemoryProjectConfigRepository:
    """Config repository used by tests and throwaway sessions."""

    def __init__(
        self,
        config: Optional[DeployConfig] = None,
        *,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._config = config or DeployConfig()
        self.on_change = on_change

    def load(self) -> DeployConfig:
        return self._config.model_copy(deep=True)

    def save(self, config: DeployConfig) -> DeployConfig:
        self._config = config.model_copy(deep=True)
        if self.on_change is not None:
            self.on_change()
        return config

    def get_project(self, name: str) -> ProjectConfig:
        project = self._config.get_project(name)
        if project is None:
            raise ProjectNotFoundError(name)
        return project.model_copy()
