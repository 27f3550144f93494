"""Shared CLI utilities.

Provides common functionality for all CLI commands.
"""

import functools
from pathlib import Path
from typing import Callable, Optional, TypeVar

import structlog
import typer

from plumly_summarizer.models.config import SummarizerSettings
from plumly_summarizer.observability.logging import configure_logging
from plumly_summarizer.services.config_manager import (
    ConfigManager,
    ConfigValidationError,
)
from plumly_summarizer.services.llm.client import SummaryClient
from plumly_summarizer.services.llm.exceptions import LLMProviderError

# Configure structured logging
configure_logging()
logger = structlog.get_logger()

# Exit code for configuration problems (bad file, missing API key)
CONFIG_ERROR_EXIT_CODE = 2

# Type variable for decorator
F = TypeVar("F", bound=Callable)


def load_settings(config_path: Optional[Path]) -> SummarizerSettings:
    """Load and validate settings, then apply their logging options.

    Args:
        config_path: Path to configuration file, or None for defaults.

    Returns:
        Validated SummarizerSettings.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    manager = ConfigManager(config_path=str(config_path) if config_path else None)
    try:
        settings = manager.load_settings()
    except (FileNotFoundError, ConfigValidationError) as e:
        display_error(f"Configuration Error: {e}")
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE)

    configure_logging(level=settings.log_level, json_output=settings.json_logs)
    return settings


def build_client(settings: SummarizerSettings) -> SummaryClient:
    """Create a SummaryClient, exiting on configuration problems."""
    try:
        return SummaryClient.from_settings(settings)
    except LLMProviderError as e:
        display_error(f"Configuration Error: {e}")
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE)


def handle_errors(func: F) -> F:
    """Decorator for consistent error handling.

    Catches exceptions and displays user-friendly error messages.

    Args:
        func: Function to wrap.

    Returns:
        Wrapped function with error handling.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            logger.exception("command_failed")
            display_error(f"Error: {e}")
            raise typer.Exit(code=1)

    return wrapper  # type: ignore[return-value]


def display_success(message: str) -> None:
    """Display a success message."""
    typer.secho(message, fg=typer.colors.GREEN)


def display_error(message: str) -> None:
    """Display an error message."""
    typer.secho(message, fg=typer.colors.RED, err=True)
