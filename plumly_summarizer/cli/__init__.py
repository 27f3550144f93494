"""Plumly Summarizer CLI Package.

Provides a command-line interface for the clinical summary client.

Usage:
    python -m plumly_summarizer.cli summarize request.json --config config.yaml
    python -m plumly_summarizer.cli check-connection
    python -m plumly_summarizer.cli validate-config config.yaml
"""

import typer

from plumly_summarizer.cli.summarize import summarize_command
from plumly_summarizer.cli.check_connection import check_connection_command
from plumly_summarizer.cli.validate import validate_config_command

# Create main app
app = typer.Typer(help="Plumly: resilient LLM summaries of clinical data")

app.command(name="summarize")(summarize_command)
app.command(name="check-connection")(check_connection_command)
app.command(name="validate-config")(validate_config_command)

__all__ = [
    "app",
    "summarize_command",
    "check_connection_command",
    "validate_config_command",
]
