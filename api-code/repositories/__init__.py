from .in_memory import InMemoryProjectConfigRepository
from .project_config import JsonProjectConfigRepository, ProjectNotFoundError

__all__ = [
    "InMemoryProjectConfigRepository",
    "JsonProjectConfigRepository",
    "ProjectNotFoundError",
]
