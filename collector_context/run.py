"""
Run-level helpers for driving a CollectorContext through one validation run.

Example:
    configure("config/collector_context.yaml")

    with collector_run() as context:
        context.add("refs", ReducingCollector([], lambda acc, ref: acc + [ref]))
        validator.validate(document)  # calls combine_with_collector("refs", ...)

    context.get("refs")
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from collector_context.config.loader import DEFAULT_CONFIG_PATH, load_collector_config
from collector_context.config.settings import CollectorContextConfig, CollectorSettings
from collector_context.context import CollectorContext
from collector_context.exceptions import CollectorContextError
from collector_context.logger import RunLogger, configure_logging

logger = logging.getLogger(__name__)


def configure(
    path: Path | str = DEFAULT_CONFIG_PATH, **load_kwargs
) -> CollectorContextConfig:
    """Load config from YAML and install it as the package defaults.

    Contexts created afterwards, including thread-bound ones, use the loaded
    collector settings; existing contexts keep theirs. The logging settings
    set the package logger level and become the defaults for get_logger().
    """
    config = load_collector_config(path, **load_kwargs)
    CollectorContext.configure_defaults(config.collectors)
    configure_logging(config.logging)
    logger.debug(f"Collector defaults configured from {path}: {config.collectors}")
    return config


@contextmanager
def collector_run(
    context: Optional[CollectorContext] = None,
    *,
    settings: Optional[CollectorSettings] = None,
    run_logger: Optional[RunLogger] = None,
) -> Generator[CollectorContext, None, None]:
    """
    Context manager for one validation run.

    Resets the context before yielding it and loads every collector when the
    block exits normally. When the block raises, collectors are not loaded
    and the exception propagates; the partial state stays until the next
    reset.

    Args:
        context: Context to drive. Defaults to the one bound to this thread.
        settings: Replaces the context's settings for this and later runs.
        run_logger: Receives a structured summary event for the run.

    Yields:
        The reset CollectorContext
    """
    if context is None:
        context = CollectorContext.get_instance()
    if settings is not None:
        context.settings = settings

    context.reset()
    start = time.perf_counter()
    try:
        yield context
    except Exception as e:
        if run_logger is not None:
            fields = {
                "slots": len(context),
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 3),
            }
            if isinstance(e, CollectorContextError):
                fields["error"] = e.to_dict()
            run_logger.exception("collector_run_failed", **fields)
        raise

    context.load_collectors()
    elapsed_ms = round((time.perf_counter() - start) * 1000, 3)
    logger.debug(f"Collector run finished in {elapsed_ms} ms")

    if run_logger is not None:
        run_logger.info(
            "collector_run_complete",
            slots=len(context),
            collectors=sorted(context.results()),
            elapsed_ms=elapsed_ms,
        )
