from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query

from models import DeployRequest
from repositories import ProjectNotFoundError
from repositories.project_config import JsonProjectConfigRepository
from schemas import (
    ActiveDeploymentsResponse,
    BranchListResponse,
    CanDeployResponse,
    DeployCommand,
    DeployResponse,
)
from services import DEFAULT_CALLER_ID, DeployService


def build_deploy_router(
    deploy_service: DeployService,
    config_repository: JsonProjectConfigRepository,
) -> APIRouter:
    router = APIRouter(prefix="/api/v1", tags=["deploy"])

    def _project_or_404(name: str):
        try:
            return config_repository.get_project(name)
        except ProjectNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @router.post(
        "/deploy",
        response_model=DeployResponse,
        summary="Append a deploy record to the marker file, commit, and push.",
    )
    async def trigger_deploy(
        payload: DeployCommand,
        x_caller_id: str = Header(default=DEFAULT_CALLER_ID),
    ) -> DeployResponse:
        project = _project_or_404(payload.project)
        request = DeployRequest(
            project_name=project.name,
            repo_path=project.repo_path,
            branch=payload.branch,
            environment=payload.env,
            deploy_type=payload.type,
            dry_run=payload.dry_run,
            commit_message_template=payload.commit_template or project.commit_template,
            file_content_template=payload.file_content_template or project.file_content_template,
            smart_append=project.smart_append,
        )
        result = await asyncio.to_thread(deploy_service.deploy, request, caller_id=x_caller_id)
        return DeployResponse(success=result.success, logs=result.logs, error=result.error)

    @router.get(
        "/deployments/active",
        response_model=ActiveDeploymentsResponse,
        summary="Projects currently being deployed",
    )
    async def active_deployments() -> ActiveDeploymentsResponse:
        return ActiveDeploymentsResponse(active_projects=sorted(deploy_service.gate.list_active()))

    @router.get(
        "/deployments/{project}/can-deploy",
        response_model=CanDeployResponse,
        summary="Whether the calling session may deploy the project now",
    )
    async def can_deploy(
        project: str,
        x_caller_id: str = Header(default=DEFAULT_CALLER_ID),
    ) -> CanDeployResponse:
        return CanDeployResponse(
            project=project,
            can_deploy=deploy_service.gate.can_deploy(project, x_caller_id),
        )

    @router.get(
        "/projects/{project}/branches",
        response_model=BranchListResponse,
        summary="Remote branches of the project's repository",
    )
    async def list_branches(
        project: str,
        branch_filter: Optional[str] = Query(default=None, alias="filter"),
    ) -> BranchListResponse:
        config = _project_or_404(project)
        if branch_filter is None:
            branch_filter = config.branch_filter
        branches = await asyncio.to_thread(
            deploy_service.list_branches, config.repo_path, branch_filter
        )
        return BranchListResponse(project=project, branches=branches, filter=branch_filter)

    return router
