"""Flashcard loading.

Supported inputs:
- YAML / JSON: a list of [word, definition] pairs or {"word": ..., "definition": ...} maps
- CSV: word in the first column, definition in the second
- Plain text: one "word - definition" or "word: definition" per line, # for comments
"""

import csv
import json
from pathlib import Path
from typing import Any, List, Optional

import yaml

from visual_vocab.schema.base import Flashcard


FILETYPES = {
    ".yml": "yaml",
    ".yaml": "yaml",
    ".json": "json",
    ".csv": "csv",
    ".txt": "text",
}

_TEXT_SEPARATORS = (" - ", " – ", " — ", ": ", "\t")


def _normalize(text: str) -> str:
    """Tidy typography that word processors introduce."""
    return (
        str(text)
        .replace("->", "→")
        .replace("“", '"')
        .replace("”", '"')
        .replace("¨", "")
        .strip()
    )


def _make_card(word: Any, definition: Any) -> Optional[Flashcard]:
    """Build a card, or None for rows that carry no usable pair."""
    if word is None or definition is None:
        return None
    word = _normalize(word)
    definition = _normalize(definition)
    if not word or not definition or word.lower() == definition.lower():
        return None
    return Flashcard(word=word, definition=definition)


def _cards_from_records(records: Any, source: Path) -> List[Flashcard]:
    if not isinstance(records, list):
        raise ValueError(f"{source} must contain a list of flashcards")
    cards: List[Flashcard] = []
    for record in records:
        if isinstance(record, dict):
            card = _make_card(record.get("word"), record.get("definition"))
        elif isinstance(record, (list, tuple)) and len(record) == 2:
            card = _make_card(record[0], record[1])
        else:
            raise ValueError(f"{source}: expected [word, definition], got {record!r}")
        if card is not None:
            cards.append(card)
    return cards


def parse_text_flashcards(text: str) -> List[Flashcard]:
    """Parse "word - definition" lines."""
    cards: List[Flashcard] = []
    for line in text.splitlines():
        line = line.strip()

        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        for sep in _TEXT_SEPARATORS:
            if sep in line:
                word, definition = line.split(sep, 1)
                card = _make_card(word, definition)
                if card is not None:
                    cards.append(card)
                break
    return cards


def load_flashcards(path: Path, filetype: Optional[str] = None) -> List[Flashcard]:
    """Load flashcards from ``path``; the type defaults to the file extension."""
    kind = filetype or FILETYPES.get(path.suffix.lower())
    if kind is None:
        raise ValueError(f"Cannot tell the file type of {path.name}; use one of {sorted(FILETYPES)}")

    if kind == "yaml":
        with open(path, encoding="utf-8") as f:
            return _cards_from_records(yaml.safe_load(f) or [], path)
    if kind == "json":
        with open(path, encoding="utf-8") as f:
            return _cards_from_records(json.load(f), path)
    if kind == "csv":
        cards: List[Flashcard] = []
        with path.open("r", encoding="utf-8", newline="") as f:
            for rec in csv.reader(f):
                if len(rec) < 2:
                    continue
                card = _make_card(rec[0], rec[1])
                if card is not None:
                    cards.append(card)
        return cards
    if kind == "text":
        return parse_text_flashcards(path.read_text(encoding="utf-8"))
    raise ValueError(f"Unsupported file type: {kind}")
