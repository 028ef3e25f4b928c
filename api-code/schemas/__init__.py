from .deploy import (
    ActiveDeploymentsResponse,
    BranchListResponse,
    CanDeployResponse,
    DeployCommand,
    DeployResponse,
    LogFileResponse,
    LogFilesResponse,
    SaveConfigResponse,
)

__all__ = [
    "ActiveDeploymentsResponse",
    "BranchListResponse",
    "CanDeployResponse",
    "DeployCommand",
    "DeployResponse",
    "LogFileResponse",
    "LogFilesResponse",
    "SaveConfigResponse",
]
