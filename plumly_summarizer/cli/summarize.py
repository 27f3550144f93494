"""Summarize command.

Reads a SummaryRequest JSON file and prints the validated summary.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from plumly_summarizer.cli.utils import (
    CONFIG_ERROR_EXIT_CODE,
    build_client,
    display_error,
    display_success,
    handle_errors,
    load_settings,
)
from plumly_summarizer.utils.exceptions import SummarizationError


@handle_errors
def summarize_command(
    request_path: Path = typer.Argument(..., help="SummaryRequest JSON file"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to configuration file"
    ),
    output_path: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the summary JSON here instead of stdout"
    ),
):
    """Generate a persona-specific summary for a clinical record."""
    try:
        request_data = json.loads(request_path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        display_error(f"Could not read request file: {e}")
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE)

    settings = load_settings(config_path)
    client = build_client(settings)

    try:
        response = asyncio.run(client.summarize(request_data))
    except SummarizationError as e:
        display_error(
            f"Summarization failed ({e.type.value}, retryable={e.retryable}): {e}"
        )
        raise typer.Exit(code=1)

    payload = response.model_dump_json(indent=2)
    if output_path:
        output_path.write_text(payload)
        display_success(
            f"Summary written to {output_path} ({len(response.sections)} sections)"
        )
    else:
        typer.echo(payload)
