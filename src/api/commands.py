"""Commands exposed to the GUI shell.

Each command takes primitive arguments, validates them before touching the
store, and goes through the shared ApiController. invoke() is the single
entry point the shell bridge calls: it never raises, every failure becomes
a CommandError frame.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from src.api.controller import get_controller
from src.api.protocol import (
    CommandError,
    CommandErrorData,
    CommandResponse,
    CreateKarmaParams,
    KarmaNameParams,
    RecordKarmaStatusParams,
)
from src.constants import CLOSED_WITH_ABSENT
from src.infra.errors import (
    InvalidParamsError,
    KarmaAppError,
    KarmaCreationFailed,
    KarmaLookupFailed,
    KarmaServiceError,
    KarmaStatusFailed,
    UnknownCommandError,
)
from src.model.karma import KarmaPoint, KarmaType, State

logger = structlog.get_logger()


async def create_karma(name: str, purpose: str) -> None:
    karma_type = KarmaType.from_label(purpose)
    karma_point = KarmaPoint(purpose=karma_type, name=name)

    controller = await get_controller()
    try:
        inserted = await controller.karma_service.create_karma(karma_point)
    except KarmaServiceError as e:
        raise KarmaCreationFailed(str(e)) from e
    logger.info(
        "karma_created", karma_id=inserted.id, name=inserted.name, purpose=inserted.purpose.name
    )


async def get_karma(name: str) -> dict[str, Any]:
    controller = await get_controller()
    try:
        point = await controller.karma_service.get_karma(name)
    except KarmaServiceError as e:
        raise KarmaLookupFailed(str(e)) from e
    return point.to_dict()


async def record_karma_status(
    name: str, state: str, timestamp: int, closed_with: int = CLOSED_WITH_ABSENT
) -> dict[str, Any]:
    parsed_state = State.from_wire(state)
    closing_purpose = (
        None if closed_with == CLOSED_WITH_ABSENT else KarmaType.from_code(closed_with)
    )

    controller = await get_controller()
    try:
        status = await controller.karma_service.record_status(
            name, parsed_state, timestamp, closing_purpose
        )
    except KarmaServiceError as e:
        raise KarmaStatusFailed(str(e)) from e
    return status.to_dict()


async def get_karma_status(name: str) -> dict[str, Any]:
    controller = await get_controller()
    try:
        status = await controller.karma_service.get_status(name)
    except KarmaServiceError as e:
        raise KarmaStatusFailed(str(e)) from e
    return status.to_dict()


@dataclass(frozen=True)
class Command:
    handler: Callable[..., Awaitable[Any]]
    params: type[BaseModel]


COMMANDS: dict[str, Command] = {
    "create_karma": Command(create_karma, CreateKarmaParams),
    "get_karma": Command(get_karma, KarmaNameParams),
    "record_karma_status": Command(record_karma_status, RecordKarmaStatusParams),
    "get_karma_status": Command(get_karma_status, KarmaNameParams),
}


async def invoke(name: str, params: dict[str, Any] | None = None) -> CommandResponse | CommandError:
    """Run a command by name and wrap its outcome in a response or error frame."""
    try:
        command = COMMANDS.get(name)
        if command is None:
            raise UnknownCommandError(name)
        try:
            parsed = command.params.model_validate(params or {})
        except ValidationError as e:
            raise InvalidParamsError(f"Invalid params for {name}: {e}") from e

        data = await command.handler(**parsed.model_dump())

    except KarmaAppError as e:
        logger.warning("command_error", command=name, code=e.code, kind=e.kind, error=str(e))
        return CommandError(command=name, error=CommandErrorData.model_validate(e.to_payload()))
    except Exception:
        logger.exception("unhandled_command_error", command=name)
        return CommandError(
            command=name, error=CommandErrorData(kind="external", code="INTERNAL_ERROR")
        )

    return CommandResponse(command=name, data=data)
