"""Helpers shared by the CLI command modules."""

from typing import Any

import typer
from pydantic import ValidationError

from wordflow.application.config import AppConfig, resolve_config
from wordflow.domain.errors import NotebookError, WordflowError


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    """Resolve configuration, turning validation failures into a clean exit."""
    try:
        return resolve_config(overrides)
    except ValidationError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(2) from None


def humanize_error(error: Exception) -> str:
    """Render an exception as a one-line message for the terminal."""
    if isinstance(error, ValidationError):
        parts = []
        for err in error.errors():
            loc = ".".join(str(p) for p in err.get("loc", ())) or "config"
            parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
        return "Invalid configuration: " + "; ".join(parts)
    if isinstance(error, NotebookError):
        return f"Notebook error: {error}"
    if isinstance(error, WordflowError):
        return f"Error: {error}"
    return f"Unexpected error: {error}"
