"""Check-connection command.

Sends a minimal request to the configured provider.
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from plumly_summarizer.cli.utils import (
    build_client,
    display_error,
    display_success,
    handle_errors,
    load_settings,
)


@handle_errors
def check_connection_command(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to configuration file"
    ),
):
    """Verify the provider is reachable with the configured credentials."""
    settings = load_settings(config_path)
    client = build_client(settings)

    result = asyncio.run(client.test_connection())
    if not result.success:
        display_error(f"Connection failed after {result.latency_ms:.0f} ms: {result.error}")
        raise typer.Exit(code=1)

    display_success(f"Connection OK ({settings.llm.model}, {result.latency_ms:.0f} ms)")
