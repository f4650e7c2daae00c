"""
YAML Notebook Repository: Infrastructure adapter for file-based notebooks.

Implements NotebookRepository with one YAML document per notebook:

    notes:
      - word_id: ...
        word: ...
    cards:
      - word_id: ...
        state: 2
        due: '2024-05-01T08:00:00+00:00'

Writes go to a temporary file that then replaces the notebook, so readers
always see either the old or the new snapshot.
"""

import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from wordflow.domain.constants import NOTEBOOK_SUFFIX
from wordflow.domain.errors import NotebookError
from wordflow.domain.models import Card, State, WordNote, new_card, utcnow, word_id
from wordflow.domain.ports import MarkAction, NotebookRepository

logger = logging.getLogger(__name__)


def _format_time(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    # Hand-edited files may hold unquoted timestamps that YAML already parsed.
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def card_to_record(card: Card) -> dict[str, Any]:
    return {
        "word_id": card.word_id,
        "notebook": card.notebook,
        "due": _format_time(card.due),
        "stability": float(card.stability),
        "difficulty": float(card.difficulty),
        "elapsed_days": int(card.elapsed_days),
        "scheduled_days": int(card.scheduled_days),
        "reps": int(card.reps),
        "lapses": int(card.lapses),
        "state": int(card.state),
        "last_review": _format_time(card.last_review),
        "created_at": _format_time(card.created_at),
    }


def card_from_record(record: dict[str, Any]) -> Card:
    # Unknown state tags are kept as-is; the scheduler rejects them.
    raw_state = int(record.get("state", State.New))
    state = State(raw_state) if raw_state in State._value2member_map_ else raw_state
    created_at = _parse_time(record.get("created_at"))
    return Card(
        word_id=str(record["word_id"]),
        notebook=str(record.get("notebook", "")),
        due=_parse_time(record["due"]),
        stability=float(record.get("stability", 0.0)),
        difficulty=float(record.get("difficulty", 0.0)),
        elapsed_days=int(record.get("elapsed_days", 0)),
        scheduled_days=int(record.get("scheduled_days", 0)),
        reps=int(record.get("reps", 0)),
        lapses=int(record.get("lapses", 0)),
        state=state,
        last_review=_parse_time(record.get("last_review")),
        created_at=created_at or utcnow(),
    )


class YamlNotebookRepository(NotebookRepository):
    """
    Stores a notebook as ``<directory>/<notebook>.yaml``.

    The file and its directory are created on first use.
    """

    def __init__(
        self,
        directory: Path,
        notebook: str,
        clock: Callable[[], datetime] | None = None,
    ):
        self.directory = Path(directory)
        self.notebook = notebook
        self.path = self.directory / f"{notebook}{NOTEBOOK_SUFFIX}"
        self._clock = clock or utcnow
        self._init()

    def _init(self) -> None:
        if self.path.exists():
            return
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path.touch()
        except OSError as e:
            raise NotebookError(f"create notebook file failed: {self.path}: {e}") from e
        logger.info(f"Created notebook {self.path}")

    # ------------------------------------------------------------------
    # NotebookRepository
    # ------------------------------------------------------------------

    def mark(self, word: str, action: MarkAction) -> WordNote | None:
        action = MarkAction(action)
        data = self._read()
        notes = data["notes"]
        cards = data["cards"]

        wid = word_id(word)
        now = self._clock()
        now_ts = int(now.timestamp())

        note = next((n for n in notes if n["word_id"] == wid), None)

        if action == MarkAction.DELETE:
            data["notes"] = [n for n in notes if n["word_id"] != wid]
            data["cards"] = [c for c in cards if c["word_id"] != wid]
            self._write(data)
            logger.info(f"Deleted '{word}' from notebook {self.notebook}")
            return None

        if note is None:
            note = {
                "word_id": wid,
                "word": word,
                "lookup_times": 0,
                "create_time": now_ts,
                "last_lookup_time": now_ts,
            }
            notes.append(note)

        if action == MarkAction.LEARNING:
            note["lookup_times"] += 1
            if not any(c["word_id"] == wid for c in cards):
                cards.append(card_to_record(new_card(wid, self.notebook, now)))
        else:
            note["lookup_times"] -= 1
        note["last_lookup_time"] = now_ts

        self._write(data)
        logger.debug(f"Marked '{word}' as {action.value} in notebook {self.notebook}")
        return WordNote(**note)

    def list_notes(self) -> list[WordNote]:
        notes = [WordNote(**n) for n in self._read()["notes"]]
        notes.sort(key=lambda n: n.create_time, reverse=True)
        return notes

    def list_notebooks(self) -> list[str]:
        try:
            entries = sorted(self.directory.iterdir())
        except OSError as e:
            raise NotebookError(f"list notebook directory failed: {e}") from e

        notebooks = []
        for entry in entries:
            if entry.is_dir():
                continue
            if entry.suffix != NOTEBOOK_SUFFIX:
                logger.warning(f"ignore invalid notebook file: {entry.name}")
                continue
            notebooks.append(entry.stem)
        return notebooks

    def load_cards(self) -> list[Card]:
        data = self._read()
        try:
            return [card_from_record(r) for r in data["cards"]]
        except (KeyError, TypeError, ValueError) as e:
            raise NotebookError(f"invalid card record in {self.path}: {e}") from e

    def save_cards(self, cards: list[Card]) -> None:
        data = self._read()
        index = {r["word_id"]: i for i, r in enumerate(data["cards"])}
        for card in cards:
            record = card_to_record(card)
            if card.word_id in index:
                data["cards"][index[card.word_id]] = record
            else:
                index[card.word_id] = len(data["cards"])
                data["cards"].append(record)
        self._write(data)
        logger.debug(f"Saved {len(cards)} cards to {self.path}")

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, list[dict[str, Any]]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise NotebookError(f"read notebook file failed: {e}") from e

        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as e:
            raise NotebookError(f"parse notebook file failed: {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise NotebookError(f"notebook file is not a mapping: {self.path}")
        return {
            "notes": list(data.get("notes") or []),
            "cards": list(data.get("cards") or []),
        }

    def _write(self, data: dict[str, list[dict[str, Any]]]) -> None:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise NotebookError(f"write notebook file failed: {e}") from e
