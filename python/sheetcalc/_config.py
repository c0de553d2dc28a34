"""Configuration management for sheetcalc."""

from __future__ import annotations

import codecs
import logging
import os
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from sheetcalc.exceptions import SettingsError

logger = logging.getLogger(__name__)

# Settings field -> environment variable
ENV_VARS = {
    "default_version": "SHEETCALC_VERSION",
    "snapshot_encoding": "SHEETCALC_ENCODING",
    "snapshot_indent": "SHEETCALC_INDENT",
}


class Settings(BaseModel):
    """Library settings; :meth:`from_env` reads them from the environment."""

    # Version tag given to new sheets and required of loaded snapshots
    default_version: str = "default"

    # Snapshot file encoding and JSON indentation (None writes one line)
    snapshot_encoding: str = "utf-8"
    snapshot_indent: Optional[int] = Field(default=2, ge=0)

    @field_validator("snapshot_encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"unknown encoding {value!r}") from None
        return value

    @field_validator("snapshot_indent", mode="before")
    @classmethod
    def _blank_indent_is_compact(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``SHEETCALC_*`` variables; unset ones keep defaults.

        Raises SettingsError naming the first variable whose value is rejected.
        """
        values = {field: os.environ[var] for field, var in ENV_VARS.items() if var in os.environ}
        try:
            return cls(**values)
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0])
            raise SettingsError(
                ENV_VARS[field], f"{values[field]!r} ({error['msg']})"
            ) from e


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except SettingsError as e:
        logger.warning("%s; using default settings", e)
        return Settings()


settings = _load_settings()
