"""
Structured exception hierarchy with execution context for collector_context.

All exceptions include:
- correlation_id: Trace errors back to a single validation run
- execution_context: Slot name and owning thread
- resolution_hints: Actionable suggestions for common issues
- severity: ERROR, or RECOVERABLE when reset() clears the cause

The core context operations are permissive and raise none of these by
default. They are raised by configuration loading and, when ``strict`` mode
is enabled, by the combine and load operations.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
import threading
import uuid


class ErrorSeverity(str, Enum):
    """Error severity levels for triage and alerting"""
    ERROR = "error"            # Caller contract violated
    RECOVERABLE = "recoverable"  # reset() and retry is enough


class ErrorCategory(str, Enum):
    """Error categories for diagnostics and resolution routing"""
    CONFIGURATION = "configuration"    # Invalid config, missing file
    COLLECTOR = "collector"            # Slot lookups and combine targets
    LIFECYCLE = "lifecycle"            # Load/reset ordering


@dataclass
class ExecutionContext:
    """Execution context attached to every collector_context error"""

    slot_name: Optional[str] = None
    thread_name: Optional[str] = field(
        default_factory=lambda: threading.current_thread().name
    )

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize context for logging and storage"""
        return {
            k: v for k, v in self.__dict__.items()
            if v is not None and not k.startswith('_')
        }


@dataclass
class ResolutionHint:
    """Actionable resolution guidance for common error patterns"""

    title: str
    description: str
    steps: List[str]
    documentation_url: Optional[str] = None


class CollectorContextError(Exception):
    """
    Base exception for collector_context with structured context.

    All package exceptions inherit from this class so callers can catch a
    single type and still get diagnostic information.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[ExecutionContext] = None,
        category: ErrorCategory = ErrorCategory.COLLECTOR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        resolution_hints: Optional[List[ResolutionHint]] = None,
        original_exception: Optional[Exception] = None,
        **kwargs
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ExecutionContext()
        self.category = category
        self.severity = severity
        self.resolution_hints = resolution_hints or []
        self.original_exception = original_exception
        self.additional_data = kwargs

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the structured fields of a run log event"""
        data: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": self.context.to_dict(),
            "resolution_hints": [asdict(hint) for hint in self.resolution_hints],
        }
        if self.original_exception is not None:
            data["original_exception"] = repr(self.original_exception)
        data.update(self.additional_data)
        return data


# Configuration Errors
class ConfigurationError(CollectorContextError):
    """Configuration-related errors"""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)


class InvalidConfigurationError(ConfigurationError):
    """Invalid configuration parameter or structure"""
    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        **kwargs
    ):
        if config_path:
            message = f"{message} (config_path: {config_path})"
        super().__init__(message, severity=ErrorSeverity.ERROR, **kwargs)


# Collector Errors (strict mode only)
class CollectorError(CollectorContextError):
    """Errors about the slot targeted by a collector operation"""
    def __init__(self, message: str, slot_name: Optional[str] = None, **kwargs):
        if slot_name and "context" not in kwargs:
            kwargs["context"] = ExecutionContext(slot_name=slot_name)
        super().__init__(message, category=ErrorCategory.COLLECTOR, **kwargs)
        self.slot_name = slot_name


class CollectorNotFoundError(CollectorError):
    """combine_with_collector targeted a name with no registered slot"""
    def __init__(self, slot_name: str, available: Optional[List[str]] = None, **kwargs):
        names = ", ".join(sorted(available or [])) or "(none)"
        message = (
            f"No slot registered under '{slot_name}'. "
            f"Registered slots: [{names}]"
        )
        if "resolution_hints" not in kwargs:
            kwargs["resolution_hints"] = [
                ResolutionHint(
                    title="Register The Collector First",
                    description="Strict mode requires the collector to exist before data is combined",
                    steps=[
                        f"Call context.add('{slot_name}', collector) before validation starts",
                        "Or disable strict mode to make missing targets a no-op",
                    ],
                )
            ]
        super().__init__(message, slot_name=slot_name, severity=ErrorSeverity.ERROR, **kwargs)


class NotACollectorError(CollectorError):
    """combine_with_collector targeted a slot holding a plain value"""
    def __init__(self, slot_name: str, value_type: Optional[str] = None, **kwargs):
        message = f"Slot '{slot_name}' holds a plain value, not a collector"
        if value_type:
            message = f"{message} (type: {value_type})"
        super().__init__(message, slot_name=slot_name, severity=ErrorSeverity.ERROR, **kwargs)


# Lifecycle Errors
class LifecycleError(CollectorContextError):
    """Errors in the load/reset ordering of a run"""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, category=ErrorCategory.LIFECYCLE, **kwargs)


class CollectorsAlreadyLoadedError(LifecycleError):
    """load_collectors called again before reset with reloading disabled"""
    def __init__(self, message: str = "Collectors were already loaded for this run", **kwargs):
        if "resolution_hints" not in kwargs:
            kwargs["resolution_hints"] = [
                ResolutionHint(
                    title="Reset Between Runs",
                    description="Each run may finalize its collectors once when allow_reload is false",
                    steps=[
                        "Call context.reset() before starting the next validation run",
                        "Or set collectors.allow_reload: true if finalize() is idempotent",
                    ],
                )
            ]
        super().__init__(message, severity=ErrorSeverity.RECOVERABLE, **kwargs)
