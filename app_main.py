from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


PROJECT_ROOT = Path(__file__).resolve().parent
API_CODE_PATH = PROJECT_ROOT / "api-code"
if str(API_CODE_PATH) not in sys.path:
    sys.path.insert(0, str(API_CODE_PATH))

from env_loader import load_local_env  # noqa: E402
from repositories import JsonProjectConfigRepository  # noqa: E402
from routers import (  # noqa: E402
    build_config_router,
    build_deploy_router,
    build_events_router,
    build_health_router,
    build_logs_router,
)
from services import DeployLogStore, DeploymentGate, DeployService, EventHub  # noqa: E402
from settings import get_settings  # noqa: E402


load_local_env()
settings = get_settings()

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger("commit-deploy")

app = FastAPI(
    title="Commit Deploy API",
    version="0.1.0",
    description="Deploy-by-commit automation: marker file update, commit and push per project.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

event_hub = EventHub()
deployment_gate = DeploymentGate()
deployment_gate.subscribe(event_hub.publish_active_projects)
log_store = DeployLogStore(settings.resolved_log_dir)
config_repository = JsonProjectConfigRepository(
    settings.resolved_config_path,
    sample_path=settings.sample_config_path,
    on_change=event_hub.publish_config_updated,
)
deploy_service = DeployService(settings, log_store=log_store, gate=deployment_gate)

app.include_router(build_deploy_router(deploy_service, config_repository))
app.include_router(build_config_router(config_repository))
app.include_router(build_logs_router(log_store))
app.include_router(build_events_router(event_hub, deployment_gate))
app.include_router(build_health_router(deploy_service))


@app.on_event("startup")
async def on_startup() -> None:
    event_hub.bind_loop(asyncio.get_running_loop())
    try:
        config = config_repository.load()
        logger.info(
            "Loaded %d project(s) from %s", len(config.projects), config_repository.path
        )
    except (OSError, ValueError) as exc:
        logger.warning("Project config unavailable (%s); fix %s and reload.", exc, config_repository.path)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app_main:app", host=settings.host, port=settings.port, reload=False)
