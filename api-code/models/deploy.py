from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.deploy_states import DeployStep


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DeployRequest(BaseModel):
    """Immutable input for a single deploy run."""

    model_config = {"frozen": True, "populate_by_name": True}

    project_name: str = Field(..., alias="projectName")
    repo_path: str = Field(..., alias="repoPath", description="Path to a git working tree.")
    branch: str = Field(..., description="Branch to check out and pull before committing.")
    environment: str = Field(..., alias="env", description="Value substituted for {env}.")
    deploy_type: str = Field(
        ...,
        alias="type",
        description="Value substituted for {type}; 'all' strips the placeholder instead.",
    )
    dry_run: bool = Field(default=False, alias="dryRun")
    commit_message_template: str = Field(
        default="deploy: {env}, {type}", alias="commitTemplate"
    )
    file_content_template: str = Field(
        default="deploy: {env}, {type}", alias="fileContentTemplate"
    )
    smart_append: bool = Field(default=False, alias="smartAppend")


class CommandResult(BaseModel):
    ok: bool
    output: str = ""
    command: str
    returncode: Optional[int] = None


class StepOutcome(BaseModel):
    """Tagged result of one pipeline step."""

    step: DeployStep
    ok: bool
    skipped: bool = False
    message: Optional[str] = None


class DeployResult(BaseModel):
    success: bool
    logs: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    steps: List[StepOutcome] = Field(default_factory=list)
    final_step: DeployStep = DeployStep.INIT

    model_config = {"frozen": True}


class MergeAction(str, Enum):
    INITIALIZED = "initialized"
    APPENDED = "appended"
    INCREMENTED = "incremented"


class MergeOutcome(BaseModel):
    content: str
    action: MergeAction
    before: Optional[str] = Field(
        default=None, description="Anchor line text before a '+' increment."
    )
    after: Optional[str] = Field(
        default=None, description="Anchor line text after a '+' increment, or the inserted record."
    )
