"""Configuration module for collector_context.

Submodules:
    - settings: CollectorSettings, LoggingSettings and the top-level model
    - loader: YAML loading with environment overrides
"""

from .settings import (
    CollectorContextConfig,
    CollectorSettings,
    LoggingSettings,
)

from .loader import (
    DEFAULT_CONFIG_PATH,
    load_collector_config,
)

__all__ = [
    "CollectorContextConfig",
    "CollectorSettings",
    "LoggingSettings",
    "DEFAULT_CONFIG_PATH",
    "load_collector_config",
]
