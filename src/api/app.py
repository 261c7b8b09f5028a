"""HTTP bridge the GUI shell uses to invoke commands.

The store is not opened at startup: the first command initializes the
shared controller lazily. Shutdown releases its pool.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import Body, FastAPI

from src.api.commands import COMMANDS, invoke
from src.api.controller import shutdown_controller
from src.api.protocol import CommandError, CommandResponse
from src.config.settings import get_settings
from src.infra.logging import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging(json_output=settings.logging.json_output, log_level=settings.logging.level)
    logger.info(
        "gateway_started",
        host=settings.gateway.host,
        port=settings.gateway.port,
        database=settings.database.path,
        commands=sorted(COMMANDS),
    )

    yield

    # Cleanup
    await shutdown_controller()


app = FastAPI(title="Karma Tracker", version="0.1.0", lifespan=lifespan)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/invoke/{command}")
async def invoke_command(
    command: str, params: dict[str, Any] | None = Body(default=None)
) -> CommandResponse | CommandError:
    return await invoke(command, params)


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.gateway.host, port=settings.gateway.port)
