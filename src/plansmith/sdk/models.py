"""Pydantic settings for the SDK and the ``plansmith`` command."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from plansmith.sdk.errors import SettingsError

ENV_PREFIX = "PLANSMITH_"


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None
    export_to_console: bool = True


class Settings(BaseModel):
    """Runtime settings for creating and applying plans."""

    outdir: Path | None = Field(default=None, description="Manifest directory; a temp dir when unset.")
    keep_manifests: bool = Field(default=False, description="Keep a temporary manifest directory after apply.")
    dry_run: bool = Field(default=False, description="Echo local actions instead of running them.")
    timeout: float | None = Field(default=None, gt=0, description="Deadline for the whole apply, in seconds.")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Log level for the plansmith loggers."
    )
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> Settings:
        """Build settings from ``PLANSMITH_*`` variables.

        Recognized: ``OUTDIR``, ``KEEP_MANIFESTS``, ``DRY_RUN``, ``TIMEOUT``,
        ``LOG_LEVEL``, ``OTEL_ENABLED``, ``OTEL_CONSOLE``, ``OTLP_ENDPOINT``.
        Keyword overrides that are not ``None`` win over the environment.

        Raises:
            SettingsError: A value fails validation.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for field in ("outdir", "keep_manifests", "dry_run", "timeout", "log_level"):
            value = env.get(f"{ENV_PREFIX}{field.upper()}")
            if value:
                data[field] = value

        telemetry: dict[str, Any] = {}
        if enabled := env.get(f"{ENV_PREFIX}OTEL_ENABLED"):
            telemetry["enabled"] = enabled
        if console := env.get(f"{ENV_PREFIX}OTEL_CONSOLE"):
            telemetry["export_to_console"] = console
        if endpoint := env.get(f"{ENV_PREFIX}OTLP_ENDPOINT"):
            telemetry["otlp_endpoint"] = endpoint
        if telemetry:
            data["telemetry"] = telemetry

        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise SettingsError(str(exc)) from exc
