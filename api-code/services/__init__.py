from .command_runner import CommandExecutionError, CommandRunner
from .deploy_log import DeployLog, DeployLogStore
from .deploy_service import DEFAULT_CALLER_ID, DeployService
from .deployment_gate import DeploymentGate
from .errors import DeployError, MarkerFileMissingError, RepositoryNotFoundError
from .event_hub import EventHub

__all__ = [
    "CommandExecutionError",
    "CommandRunner",
    "DEFAULT_CALLER_ID",
    "DeployError",
    "DeployLog",
    "DeployLogStore",
    "DeployService",
    "DeploymentGate",
    "EventHub",
    "MarkerFileMissingError",
    "RepositoryNotFoundError",
]
