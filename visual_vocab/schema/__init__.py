"""Data model definitions."""

from visual_vocab.schema.base import (
    FRONT_BACK_DIVIDER,
    Flashcard,
    ImageCandidate,
    PlainExample,
    TranslatedExample,
    DictionaryExample,
    PlainDefinition,
    GroupedDefinition,
    GroupedDefinitionWithExamples,
    DictionaryDefinition,
    DictionaryEntry,
    examples_of,
    RankedCandidate,
    VisualFlashcard,
    TaskStage,
    EnrichmentResult,
)

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
