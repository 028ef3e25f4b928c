from __future__ import annotations

from fastapi import APIRouter, HTTPException

from models import DeployConfig
from repositories.project_config import JsonProjectConfigRepository
from schemas import SaveConfigResponse


def build_config_router(config_repository: JsonProjectConfigRepository) -> APIRouter:
    router = APIRouter(prefix="/api/v1", tags=["config"])

    @router.get("/config", response_model=DeployConfig)
    async def load_config() -> DeployConfig:
        try:
            return config_repository.load()
        except ValueError as exc:
            raise HTTPException(status_code=500, detail=f"invalid config: {exc}") from exc

    @router.put("/config", response_model=SaveConfigResponse)
    async def save_config(config: DeployConfig) -> SaveConfigResponse:
        try:
            saved = config_repository.save(config)
        except OSError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return SaveConfigResponse(success=True, projects=len(saved.projects))

    return router
