"""Notebook subcommands: list, due, exam, preview, stats."""

import dataclasses
import json
from datetime import datetime, timedelta
from typing import Annotated

import typer

from wordflow.application.session import ReviewSession
from wordflow.domain.errors import WordflowError
from wordflow.domain.models import Card, Rating, SessionResult, State, utcnow, word_id
from wordflow.interface._common import _resolve_with_overrides, humanize_error

notebook_app = typer.Typer(help="Learn the words in a notebook.", no_args_is_help=True)

NotebookOption = Annotated[
    str | None, typer.Option("--notebook", "-n", help="Notebook name. Defaults to config.")
]

RATING_HELP = {
    Rating.Again: "Complete failure",
    Rating.Hard: "Difficult recall",
    Rating.Good: "Moderate effort",
    Rating.Easy: "Very easy",
}


def _fail(error: Exception) -> None:
    typer.secho(humanize_error(error), fg="red", err=True)
    raise typer.Exit(1)


def _format_interval(delta: timedelta) -> str:
    minutes = int(delta.total_seconds() // 60)
    if minutes < 60:
        return f"{minutes}m"
    if minutes < 24 * 60:
        return f"{minutes // 60}h"
    return f"{delta.days}d"


def _words_by_id(repo) -> dict[str, str]:
    return {note.word_id: note.word for note in repo.list_notes()}


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@notebook_app.command("list")
def list_words(notebook: NotebookOption = None):
    """List the words in the notebook, newest first."""
    from wordflow.application.factory import get_notebook_repository

    config = _resolve_with_overrides(notebook=notebook)
    try:
        notes = get_notebook_repository(config).list_notes()
    except WordflowError as e:
        _fail(e)

    if not notes:
        typer.secho("Notebook is empty.", fg="yellow")
        return
    for note in notes:
        last = datetime.fromtimestamp(note.last_lookup_time).strftime("%Y-%m-%d %H:%M")
        typer.echo(f"{note.word}  (lookupTimes:{note.lookup_times}, last: {last})")


@notebook_app.command("notebooks")
def list_notebooks():
    """List all notebooks."""
    from wordflow.application.factory import get_notebook_repository

    config = _resolve_with_overrides()
    try:
        names = get_notebook_repository(config).list_notebooks()
    except WordflowError as e:
        _fail(e)

    for name in names:
        marker = "*" if name == config.notebook else " "
        typer.echo(f"{marker} {name}")


@notebook_app.command("due")
def due(notebook: NotebookOption = None):
    """Show the words due for review, in session order."""
    from wordflow.application.factory import get_notebook_repository, get_review_service

    config = _resolve_with_overrides(notebook=notebook)
    now = utcnow()
    try:
        cards = get_review_service(config).due(now)
        words = _words_by_id(get_notebook_repository(config))
    except WordflowError as e:
        _fail(e)

    if not cards:
        typer.secho("No words due for review!", fg="green")
        return
    for card in cards:
        when = "new" if card.state == State.New else f"due {card.due:%Y-%m-%d %H:%M}"
        typer.echo(f"{words.get(card.word_id, card.word_id)}  [{card.state.name}] {when}")
    typer.echo(f"Due words: {len(cards)}")


# ---------------------------------------------------------------------------
# Exam
# ---------------------------------------------------------------------------


def _render_options(session: ReviewSession, now: datetime) -> None:
    preview = session.preview()
    for rating in Rating:
        outcome = preview[rating]
        typer.echo(
            f"  [{rating.value}] {rating.name:<5} - {RATING_HELP[rating]}"
            f"  (next: {_format_interval(outcome.due - now)})"
        )


def _render_summary(result: SessionResult) -> None:
    typer.secho("\nSession Complete", bold=True)
    typer.echo(f"Reviewed {result.completed} words this session")
    if result.skipped:
        typer.echo(f"Skipped {result.skipped} words")
    if result.success_rate is not None:
        typer.echo(f"Success Rate: {result.success_rate:.1f}%")
    typer.echo(f"Duration: {timedelta(seconds=round(result.duration.total_seconds()))}")


@notebook_app.command("exam")
def exam(
    notebook: NotebookOption = None,
    max_reviews: Annotated[
        int | None, typer.Option("--max-reviews", help="Maximum words in this session.")
    ] = None,
    new_cards: Annotated[
        int | None, typer.Option("--new-cards", help="Maximum new words in this session.")
    ] = None,
):
    """Review due words with FSRS scheduling."""
    from wordflow.application.factory import get_notebook_repository, get_review_service

    config = _resolve_with_overrides(
        notebook=notebook,
        max_reviews_per_session=max_reviews,
        new_cards_per_day=new_cards,
    )
    service = get_review_service(config)
    try:
        session = service.start(utcnow())
        words = _words_by_id(get_notebook_repository(config))
    except WordflowError as e:
        _fail(e)

    if session.total == 0:
        typer.secho("No words due for review!", fg="green")
        typer.echo("Add some words to your notebook first using 'wordflow mark <word>'")
        return

    while not session.is_complete:
        card = session.current
        now = utcnow()
        typer.secho(
            f"\nVocabulary Exam: {session.position + 1}/{session.total}", fg="magenta"
        )
        typer.secho(words.get(card.word_id, card.word_id), bold=True)
        _render_options(session, now)

        answer = typer.prompt("[1-4: Rate] [s: Skip] [q: Quit]", default="q").strip().lower()
        if answer == "q":
            break
        if answer == "s":
            session.skip()
            continue
        if answer in {"1", "2", "3", "4"}:
            session.rate(Rating(int(answer)))
            continue
        typer.secho(f"Unknown choice: {answer}", fg="yellow")

    result = session.results()
    try:
        service.commit(result)
    except WordflowError as e:
        _fail(e)
    _render_summary(result)


# ---------------------------------------------------------------------------
# Preview / stats
# ---------------------------------------------------------------------------


def _find_card(cards: list[Card], word: str) -> Card | None:
    wid = word_id(word)
    return next((c for c in cards if c.word_id == wid), None)


@notebook_app.command("preview")
def preview(
    word: Annotated[str, typer.Argument(help="Word to preview.")],
    notebook: NotebookOption = None,
):
    """Show how each rating would reschedule a word."""
    from wordflow.application.factory import get_notebook_repository, get_scheduler

    config = _resolve_with_overrides(notebook=notebook)
    try:
        card = _find_card(get_notebook_repository(config).load_cards(), word)
    except WordflowError as e:
        _fail(e)

    if card is None:
        typer.secho(f"'{word}' is not in notebook {config.notebook}.", fg="yellow")
        raise typer.Exit(1)

    now = utcnow()
    try:
        outcomes = get_scheduler(config).repeat(card, now)
    except WordflowError as e:
        _fail(e)
    typer.echo(
        f"{word}  [{card.state.name}] S={card.stability:.2f} D={card.difficulty:.2f} "
        f"reps={card.reps} lapses={card.lapses}"
    )
    for rating, outcome in outcomes.items():
        typer.echo(
            f"  {rating.name:<5} -> {outcome.state.name:<10} "
            f"S={outcome.stability:.2f} D={outcome.difficulty:.2f} "
            f"next in {_format_interval(outcome.due - now)}"
        )


@notebook_app.command("stats")
def stats(
    notebook: NotebookOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Summarize memory state and list weak words."""
    from wordflow.application.factory import get_notebook_repository, get_scheduler
    from wordflow.application.stats import NotebookStatsService

    config = _resolve_with_overrides(notebook=notebook)
    repo = get_notebook_repository(config)
    service = NotebookStatsService(repo, get_scheduler(config))
    now = utcnow()
    try:
        summary = service.summary(now)
        weak = service.weak_words(now)
        words = _words_by_id(repo)
    except WordflowError as e:
        _fail(e)

    if json_output:
        payload = dataclasses.asdict(summary)
        payload["weak_words"] = [
            {
                "word": words.get(m.word_id, m.word_id),
                "stability": m.stability,
                "difficulty": m.difficulty,
                "retrievability": m.retrievability,
                "lapses": m.lapses,
            }
            for m in weak
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"Words: {summary.total}  Due: {summary.due}")
    typer.echo("  ".join(f"{name}: {count}" for name, count in summary.by_state.items()))
    if summary.average_stability is not None:
        typer.echo(
            f"Avg stability: {summary.average_stability:.1f}d  "
            f"Avg difficulty: {summary.average_difficulty:.1f}  "
            f"Avg retrievability: {summary.average_retrievability:.0%}"
        )
    if weak:
        typer.secho(f"\nWeak words: {len(weak)}", fg="yellow")
        for m in weak:
            typer.echo(
                f"  {words.get(m.word_id, m.word_id)}  "
                f"R={m.retrievability:.0%} S={m.stability:.1f}d lapses={m.lapses}"
            )
