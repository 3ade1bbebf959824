"""Pipeline stages.

A run is a list of stages; each stage receives the previous stage's output:

    LoadStage(path)              None            -> List[Flashcard]
    VisualVocabStage(config)     List[Flashcard] -> List[EnrichmentResult]
    RenderStage(out_dir)         results         -> int (cards written)
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, List, Optional

from visual_vocab.common.config import PipelineConfig
from visual_vocab.common.errors import PipelineError
from visual_vocab.input.loader import load_flashcards
from visual_vocab.output.cards import write_visual_cards
from visual_vocab.output.visual import VisualVocabEnricher
from visual_vocab.schema.base import EnrichmentResult, Flashcard


class PipelineStage(ABC):
    name: str = "stage"

    @abstractmethod
    def run(self, data: Any) -> Any:
        """Process the previous stage's output and return this stage's output."""


def _require_list_of(data: Any, item_type: type, stage: str) -> List[Any]:
    if not isinstance(data, list) or not all(isinstance(x, item_type) for x in data):
        raise PipelineError(f"{stage} expects a list of {item_type.__name__}, got {type(data).__name__}")
    return data


class LoadStage(PipelineStage):
    name = "load"

    def __init__(self, path: Path, filetype: Optional[str] = None, verbose: bool = False) -> None:
        self.path = path
        self.filetype = filetype
        self.verbose = verbose

    def run(self, data: Any) -> List[Flashcard]:
        if data is not None:
            raise PipelineError("load does not accept input")
        cards = load_flashcards(self.path, self.filetype)
        if self.verbose:
            print(f"[load] [info] Loaded {len(cards)} flashcards from {self.path.name}")
        return cards


class VisualVocabStage(PipelineStage):
    name = "visual_vocab"

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        enricher: Optional[VisualVocabEnricher] = None,
        verbose: bool = False,
    ) -> None:
        self.config = config or PipelineConfig()
        self.enricher = enricher
        self.verbose = verbose

    def run(self, data: Any) -> List[EnrichmentResult]:
        cards = _require_list_of(data, Flashcard, self.name)
        if self.enricher is None:
            self.enricher = VisualVocabEnricher(self.config, verbose=self.verbose)
        return self.enricher.enrich_batch(cards)


class RenderStage(PipelineStage):
    name = "render"

    def __init__(self, out_dir: Path, rows: int = 6, columns: int = 3, verbose: bool = False) -> None:
        self.out_dir = out_dir
        self.rows = rows
        self.columns = columns
        self.verbose = verbose

    def run(self, data: Any) -> int:
        results = _require_list_of(data, EnrichmentResult, self.name)
        return write_visual_cards(self.out_dir, results, self.rows, self.columns, verbose=self.verbose)


def run_pipeline(stages: Iterable[PipelineStage], data: Any = None) -> Any:
    """Feed ``data`` through ``stages`` in order and return the last output."""
    for stage in stages:
        data = stage.run(data)
    return data
