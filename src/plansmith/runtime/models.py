"""Data models for the apply runtime."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RunnerResult(BaseModel):
    """Result of running one local-execution manifest."""

    action: str = Field(..., description="The action that was dispatched.")
    command: list[str] = Field(default_factory=list, description="Command line actually executed, if any.")
    exit_code: int = Field(default=0, description="Process exit code.")
    output: str = Field(default="", description="Combined stdout and stderr.")
