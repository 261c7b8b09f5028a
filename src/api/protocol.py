"""Command parameter schemas and the response/error frames sent to the GUI shell."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateKarmaParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    purpose: str


class KarmaNameParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str


class RecordKarmaStatusParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    state: str
    timestamp: int = Field(ge=0)
    closed_with: int = 0  # 0 = no closing purpose

    @field_validator("timestamp", "closed_with", mode="before")
    @classmethod
    def _reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("must be an integer, not a boolean")
        return v


class CommandErrorData(BaseModel):
    kind: Literal["validation", "external"]
    code: str
    # Only populated for validation errors; external failures stay opaque.
    message: str | None = None
    value: Any = None


class CommandResponse(BaseModel):
    type: Literal["response"] = "response"
    command: str
    data: Any = None


class CommandError(BaseModel):
    type: Literal["error"] = "error"
    command: str
    error: CommandErrorData
