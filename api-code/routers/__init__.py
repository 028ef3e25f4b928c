from .config import build_config_router
from .deploy import build_deploy_router
from .events import build_events_router
from .health import build_health_router
from .logs import build_logs_router

__all__ = [
    "build_config_router",
    "build_deploy_router",
    "build_events_router",
    "build_health_router",
    "build_logs_router",
]
