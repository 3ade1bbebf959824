"""Data model shared by the fetchers, the reranker and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


# Markdown card format constants
FRONT_BACK_DIVIDER: str = "---"


@dataclass(frozen=True)
class Flashcard:
    """Input vocabulary pair, read-only for the whole pipeline."""
    word: str
    definition: str

    def __str__(self) -> str:
        return f"{self.word}: {self.definition}"


@dataclass(frozen=True)
class ImageCandidate:
    """One Google Images result."""
    thumb_url: str
    thumb_width: int
    thumb_height: int
    full_url: str
    full_width: int
    full_height: int
    title: str
    source_page_url: str

    def __str__(self) -> str:
        return f"{self.title} @ {self.source_page_url} ({self.full_url} {self.full_width}x{self.full_height})"


@dataclass(frozen=True)
class PlainExample:
    text: str


@dataclass(frozen=True)
class TranslatedExample:
    text: str
    translation: str


DictionaryExample = Union[PlainExample, TranslatedExample]


@dataclass(frozen=True)
class PlainDefinition:
    text: str


@dataclass(frozen=True)
class GroupedDefinition:
    group: str
    text: str


@dataclass(frozen=True)
class GroupedDefinitionWithExamples:
    group: str
    text: str
    examples: List[DictionaryExample] = field(default_factory=list)


DictionaryDefinition = Union[PlainDefinition, GroupedDefinition, GroupedDefinitionWithExamples]


@dataclass(frozen=True)
class DictionaryEntry:
    """Everything recovered from one dictionary page."""
    word: str
    definitions: List[DictionaryDefinition] = field(default_factory=list)


def examples_of(definition: DictionaryDefinition) -> List[DictionaryExample]:
    """Examples carried by a definition; empty for variants without examples."""
    if isinstance(definition, GroupedDefinitionWithExamples):
        return list(definition.examples)
    return []


@dataclass(frozen=True)
class RankedCandidate:
    """Reranker output: position in the candidate list and cosine score."""
    index: int
    score: float


@dataclass(frozen=True)
class VisualFlashcard:
    """Enriched flashcard handed to the renderer.

    Never constructed without an image and an example.
    """
    word: str
    definition: str
    image: bytes = field(repr=False)
    example: str

    def __post_init__(self):
        if not self.image:
            raise ValueError(f"VisualFlashcard for {self.word!r} needs image bytes")
        if not self.example:
            raise ValueError(f"VisualFlashcard for {self.word!r} needs an example")


class TaskStage(str, Enum):
    """Per-word enrichment state."""
    PENDING = "pending"
    FETCHING_IMAGES = "fetching_images"
    FETCHING_DICTIONARY = "fetching_dictionary"
    RANKING = "ranking"
    PICKING_IMAGE = "picking_image"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class EnrichmentResult:
    """Outcome of one word: a card, or the stage it failed at and why.

    Failed results are the placeholders the renderer is expected to skip.
    """
    index: int
    word: str
    card: Optional[VisualFlashcard] = None
    stage: TaskStage = TaskStage.DONE
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.card is not None

    @classmethod
    def success(cls, index: int, card: VisualFlashcard) -> "EnrichmentResult":
        return cls(index=index, word=card.word, card=card, stage=TaskStage.DONE)

    @classmethod
    def failure(cls, index: int, word: str, stage: TaskStage, reason: str) -> "EnrichmentResult":
        return cls(index=index, word=word, card=None, stage=stage, reason=reason)


__all__ = [
    "FRONT_BACK_DIVIDER",
    "Flashcard",
    "ImageCandidate",
    "PlainExample",
    "TranslatedExample",
    "DictionaryExample",
    "PlainDefinition",
    "GroupedDefinition",
    "GroupedDefinitionWithExamples",
    "DictionaryDefinition",
    "DictionaryEntry",
    "examples_of",
    "RankedCandidate",
    "VisualFlashcard",
    "TaskStage",
    "EnrichmentResult",
]
