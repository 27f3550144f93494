"""CLI entry point.

Allows running the CLI as a module: python -m plumly_summarizer.cli
"""

from plumly_summarizer.cli import app

if __name__ == "__main__":
    app()
