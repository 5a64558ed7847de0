"""Configuration models."""

from .config import (
    ConsoleConfig,
    EventIdConfig,
    HandlerConfig,
    create_default_config,
    load_config,
    save_config,
)

__all__ = [
    "HandlerConfig",
    "EventIdConfig",
    "ConsoleConfig",
    "load_config",
    "save_config",
    "create_default_config",
]
