"""wordflow CLI: root commands and subgroup registration."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from wordflow.application.config import resolve_config
from wordflow.consts import VERSION
from wordflow.domain.errors import NotebookError
from wordflow.domain.ports import MarkAction
from wordflow.interface._common import _resolve_with_overrides, humanize_error

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="wordflow: vocabulary notebook with spaced-repetition reviews.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Register subgroups
# ---------------------------------------------------------------------------

from wordflow.interface.notebook_commands import notebook_app  # noqa: E402

app.add_typer(notebook_app, name="notebook")

config_app = typer.Typer(help="Manage wordflow configuration.")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for wordflow."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger().setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def mark(
    word: Annotated[str, typer.Argument(help="Word to record.")],
    notebook: Annotated[
        str | None, typer.Option("--notebook", "-n", help="Notebook name. Defaults to config.")
    ] = None,
    learned: Annotated[
        bool, typer.Option("--learned", help="Mark the word as learned (lowers its count).")
    ] = False,
    delete: Annotated[
        bool, typer.Option("--delete", help="Remove the word and its review card.")
    ] = False,
):
    """[bold green]Mark[/bold green] a word for learning."""
    from wordflow.application.factory import get_notebook_repository

    if learned and delete:
        typer.secho("--learned and --delete are mutually exclusive.", fg="red", err=True)
        raise typer.Exit(2)

    action = MarkAction.LEARNING
    if learned:
        action = MarkAction.LEARNED
    elif delete:
        action = MarkAction.DELETE

    config = _resolve_with_overrides(notebook=notebook)
    try:
        note = get_notebook_repository(config).mark(word.strip(), action)
    except NotebookError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from None

    if note is None:
        typer.echo(f"Deleted '{word}' from {config.notebook}.")
    else:
        typer.echo(f"Marked '{note.word}' ({action.value}), lookupTimes:{note.lookup_times}")


@app.command()
def version():
    """Print the wordflow version."""
    typer.echo(f"wordflow {VERSION}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
