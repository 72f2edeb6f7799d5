"""Configuration loading and validation."""

from guichat.config.loader import load_config
from guichat.config.schema import (
    BackendsConfig,
    EngineConfig,
    GuiChatConfig,
    LoggingConfig,
    PluginsConfig,
)

__all__ = [
    "BackendsConfig",
    "EngineConfig",
    "GuiChatConfig",
    "LoggingConfig",
    "PluginsConfig",
    "load_config",
]
