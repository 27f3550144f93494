"""Validate command for configuration files."""

from pathlib import Path

import typer

from plumly_summarizer.services.config_manager import ConfigManager
from plumly_summarizer.cli.utils import (
    CONFIG_ERROR_EXIT_CODE,
    display_error,
    display_success,
    handle_errors,
)


@handle_errors
def validate_config_command(
    config_path: Path = typer.Argument(..., help="Config file to validate"),
):
    """Validate configuration file syntax and semantics."""
    try:
        manager = ConfigManager(config_path=str(config_path), load_env=False)
        manager.load_settings()
        display_success("Configuration is valid!")
    except Exception as e:
        display_error(f"Validation failed: {e}")
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE)
