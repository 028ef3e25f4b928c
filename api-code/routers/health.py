from __future__ import annotations

import asyncio
import shutil
import subprocess
from typing import Any, Dict

from fastapi import APIRouter

from services import DeployService


def build_health_router(deploy_service: DeployService) -> APIRouter:
    router = APIRouter()

    @router.get("/healthz")
    async def healthcheck() -> Dict[str, Any]:
        git_version = await asyncio.to_thread(_read_git_version, deploy_service.git)
        log_dir = deploy_service.log_store.log_dir

        issues = []
        if git_version is None:
            issues.append(f"{deploy_service.git} is not available on PATH.")
        if not log_dir.is_dir():
            issues.append(f"Log directory missing: {log_dir}")

        return {
            "status": "healthy" if not issues else "degraded",
            "git": git_version or "unavailable",
            "log_dir": str(log_dir),
            "active_deployments": sorted(deploy_service.gate.list_active()),
            "issues": issues,
        }

    return router


def _read_git_version(git_binary: str) -> str | None:
    git_path = shutil.which(git_binary)
    if not git_path:
        return None

    try:
        completed = subprocess.run(  # noqa: S603
            [git_path, "--version"],
            capture_output=True,
            text=True,
            check=False,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError):  # pragma: no cover - fallback path
        return None

    if completed.returncode != 0:
        return None
    return completed.stdout.strip() or None
