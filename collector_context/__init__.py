"""
Collector context package.

Per-run registry that validation steps use to publish plain values and
collectors, combine incremental data into the collectors while a document is
validated, and read one finalized result per collector at the end.
"""

from _version import __version__, get_full_version, get_version_dict

from .exceptions import (CollectorContextError, CollectorError,
                         CollectorNotFoundError, CollectorsAlreadyLoadedError,
                         ConfigurationError, ErrorCategory, ErrorSeverity,
                         ExecutionContext, InvalidConfigurationError,
                         LifecycleError, NotACollectorError, ResolutionHint)
from .config import (CollectorContextConfig, CollectorSettings,
                     LoggingSettings, load_collector_config)
from .collector import AbstractCollector, Collector, ReducingCollector
from .slots import CollectorSlot, PlainSlot, Slot, make_slot
from .thread_info import ThreadInfo
from .context import COLLECTOR_CONTEXT_THREAD_LOCAL_KEY, CollectorContext
from .logger import JSONFormatter, RunLogger, configure_logging, get_logger
from .run import collector_run, configure

__all__ = [
    # Version
    "__version__",
    "get_full_version",
    "get_version_dict",
    # Context
    "CollectorContext",
    "COLLECTOR_CONTEXT_THREAD_LOCAL_KEY",
    "collector_run",
    "configure",
    # Collectors
    "Collector",
    "AbstractCollector",
    "ReducingCollector",
    # Slots
    "Slot",
    "PlainSlot",
    "CollectorSlot",
    "make_slot",
    # Thread store
    "ThreadInfo",
    # Config
    "CollectorContextConfig",
    "CollectorSettings",
    "LoggingSettings",
    "load_collector_config",
    # Logging
    "JSONFormatter",
    "RunLogger",
    "configure_logging",
    "get_logger",
    # Exceptions
    "CollectorContextError",
    "ConfigurationError",
    "InvalidConfigurationError",
    "CollectorError",
    "CollectorNotFoundError",
    "NotACollectorError",
    "LifecycleError",
    "CollectorsAlreadyLoadedError",
    "ErrorCategory",
    "ErrorSeverity",
    "ExecutionContext",
    "ResolutionHint",
]
