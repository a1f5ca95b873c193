"""
Editor settings.

Read from TEMPLEBUILDER_* environment variables. The CLI loads a .env file
first (python-dotenv), so settings can live there too.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from templebuilder.history import DEFAULT_MAX_DEPTH
from templebuilder.models import Shape


ENV_PREFIX = "TEMPLEBUILDER_"

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class EditorSettings(BaseModel):
    """Tunable defaults for a placement session."""
    history_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1)
    default_material: str = "stone"
    default_shape: Shape = Shape.CUBE
    log_level: LogLevel = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def load_settings(environ: dict[str, str] | None = None) -> EditorSettings:
    """Build settings from the environment. Unset variables keep their defaults."""
    environ = os.environ if environ is None else environ
    values = {}
    for field in EditorSettings.model_fields:
        raw = environ.get(ENV_PREFIX + field.upper())
        if raw is not None and raw != "":
            values[field] = raw
    return EditorSettings(**values)
