"""Input loading for vocabulary files."""

from visual_vocab.input.loader import (
    FILETYPES,
    load_flashcards,
    parse_text_flashcards,
)

__all__ = [
    "FILETYPES",
    "load_flashcards",
    "parse_text_flashcards",
]
