"""Configuration management for mcgraph."""

from mcgraph.config.config import (
    DEFAULTS,
    MCGRAPH_DIR,
    Config,
    ConfigManager,
    get_config,
    get_config_manager,
)

__all__ = [
    "DEFAULTS",
    "MCGRAPH_DIR",
    "Config",
    "ConfigManager",
    "get_config",
    "get_config_manager",
]
