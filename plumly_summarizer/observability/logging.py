"""structlog setup for the summarizer.

Log entries carry the active correlation id and any request fields bound
with ``request_log_context`` (persona, A/B variant). Modules obtain their
logger with ``get_logger("<component>")``; the component name is bound
lazily so ``configure_logging`` may run after import.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, List

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from plumly_summarizer.observability.context import get_correlation_id


def add_correlation_id_processor(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ``correlation_id`` to entries emitted inside a correlation scope."""
    corr_id = get_correlation_id()
    if corr_id is not None:
        event_dict.setdefault("correlation_id", corr_id)
    return event_dict


def build_processors(json_output: bool, add_timestamp: bool) -> List[Processor]:
    """Processor chain: request context, level, callsite, optional timestamp, renderer."""
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_correlation_id_processor,
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        structlog.processors.format_exc_info,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors.append(
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return processors


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the CLI or a host application.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        json_output: JSON lines when True, human-readable console lines otherwise
        add_timestamp: Add an ISO-8601 UTC ``timestamp`` field
    """
    structlog.configure(
        processors=build_processors(json_output, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str, **initial_context: Any) -> Any:
    """Lazy logger whose entries carry ``component`` and ``initial_context``."""
    return structlog.get_logger(component=component, **initial_context)


@contextmanager
def request_log_context(**fields: Any) -> Iterator[None]:
    """Bind request fields to every entry logged inside the block.

    Fields set to None are skipped; earlier bindings are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(
        **{key: value for key, value in fields.items() if value is not None}
    ):
        yield
