from __future__ import annotations

from fastapi import APIRouter, HTTPException

from schemas import LogFileResponse, LogFilesResponse
from services import DeployLogStore


def build_logs_router(log_store: DeployLogStore) -> APIRouter:
    router = APIRouter(prefix="/api/v1", tags=["logs"])

    @router.get("/logs", response_model=LogFilesResponse, summary="Daily deploy transcripts")
    async def list_logs() -> LogFilesResponse:
        return LogFilesResponse(log_dir=str(log_store.log_dir), files=log_store.list_log_files())

    @router.get("/logs/{filename}", response_model=LogFileResponse)
    async def read_log(filename: str) -> LogFileResponse:
        try:
            content = log_store.read_log_file(filename)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except FileNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return LogFileResponse(filename=filename, content=content)

    return router
