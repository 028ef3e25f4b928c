from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class DeployCommand(BaseModel):
    project: str = Field(..., min_length=1, description="Configured project name.")
    branch: str = Field(..., min_length=1, description="Branch to deploy from.")
    env: str = Field(..., min_length=1, description="Target environment, substituted for {env}.")
    type: str = Field(..., min_length=1, description="Deploy type, substituted for {type}.")
    dry_run: bool = Field(default=False, description="Skip the final push.")
    commit_template: Optional[str] = Field(
        default=None, description="Override for the project's commit message template."
    )
    file_content_template: Optional[str] = Field(
        default=None, description="Override for the project's marker-file record template."
    )


class DeployResponse(BaseModel):
    success: bool = Field(..., description="True when every step finished.")
    logs: List[str] = Field(default_factory=list, description="Timestamped transcript.")
    error: Optional[str] = Field(default=None, description="Failure summary.")


class ActiveDeploymentsResponse(BaseModel):
    active_projects: List[str] = Field(default_factory=list)


class CanDeployResponse(BaseModel):
    project: str
    can_deploy: bool


class BranchListResponse(BaseModel):
    project: str
    branches: List[str] = Field(default_factory=list)
    filter: str = Field(default="", description="Case-insensitive substring filter applied.")


class LogFilesResponse(BaseModel):
    log_dir: str
    files: List[str] = Field(default_factory=list, description="deploy-*.log files, newest first.")


class LogFileResponse(BaseModel):
    filename: str
    content: str


class SaveConfigResponse(BaseModel):
    success: bool
    projects: int = 0
