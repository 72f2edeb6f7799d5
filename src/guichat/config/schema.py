"""Pydantic models for guichat configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Execution coordinator behaviour."""

    suppress_instructions: bool = False
    honor_execution_delay: bool = True
    cancelled_ack: str = "The user cancelled the operation."
    failure_template: str = "The tool {tool_name} failed: {error}"


class BackendsConfig(BaseModel):
    """Backends the host application provides to plugins.

    An empty list means every backend is available.
    """

    available: list[str] = Field(default_factory=list)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""


class PluginsConfig(BaseModel):
    """Initial plugin config values, keyed by config schema key."""

    values: dict[str, Any] = Field(default_factory=dict)


class GuiChatConfig(BaseModel):
    """Top-level configuration for guichat."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    backends: BackendsConfig = Field(default_factory=BackendsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
