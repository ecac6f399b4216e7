"""Pydantic schemas for Debug Pilot settings.

This module defines the settings record accepted by driver ``configure``
calls. The same model validates ``debug-pilot.yaml`` settings files.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

XDEBUG_MODES = ("off", "develop", "coverage", "debug", "gcstats", "profile", "trace")

DEFAULT_CLIENT_PORT = 9003


class DebugSettings(BaseModel):
    """Settings written into a driver's php.ini block.

    - php_ini_path: Explicit php.ini to edit (empty means auto-detect)
    - client_host: Host the debugger connects to ("auto" resolves per environment)
    - client_port: Port the IDE listens on
    - ide_key: Xdebug IDE key
    - xdebug_mode: Comma-separated Xdebug modes
    """

    model_config = {"frozen": True}

    php_ini_path: str = ""
    client_host: str = "auto"
    client_port: int = Field(default=DEFAULT_CLIENT_PORT, ge=1, le=65535)
    ide_key: str = "PHPSTORM"
    xdebug_mode: str = "debug"

    @field_validator("client_host", "ide_key")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("xdebug_mode")
    @classmethod
    def validate_xdebug_mode(cls, v: str) -> str:
        """Normalize the mode list and reject unknown modes."""
        modes = [m.strip() for m in v.split(",") if m.strip()]
        if not modes:
            raise ValueError("at least one Xdebug mode is required")
        unknown = [m for m in modes if m not in XDEBUG_MODES]
        if unknown:
            raise ValueError(
                f"unknown Xdebug mode(s): {', '.join(unknown)}. "
                f"Valid modes: {', '.join(XDEBUG_MODES)}"
            )
        return ",".join(modes)

    def with_overrides(self, **overrides: Any) -> "DebugSettings":
        """Return a copy with the given fields replaced.

        Overrides that are None are ignored, so CLI options left unset keep
        the file or default value.
        """
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return DebugSettings(**data)
