"""Visual flashcard enrichment.

For every input flashcard one worker thread:
1. collects image candidates from Google Images,
2. looks the word up on SpanishDict (retrying with keywords of the phrase),
3. ranks the definitions that carry examples against the word and keeps the
   example of the best one,
4. downloads one candidate image, trying candidates in random order.

A word that fails at any step becomes a failed EnrichmentResult; the rest of
the batch is unaffected. Only a model that cannot be loaded at all stops the
run, since no word could be ranked.
"""

import random
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from visual_vocab.common.config import PipelineConfig
from visual_vocab.common.errors import ModelLoadError, NoCandidates, VisualVocabError
from visual_vocab.common.logging import clear_thread_log_context, set_thread_log_context
from visual_vocab.ranking.keywords import extract_keywords
from visual_vocab.ranking.reranker import Reranker, get_reranker
from visual_vocab.schema.base import (
    DictionaryEntry,
    EnrichmentResult,
    Flashcard,
    ImageCandidate,
    TaskStage,
    VisualFlashcard,
    examples_of,
)
from visual_vocab.spider.client import get_client
from visual_vocab.spider.google_image import GoogleImageSearch
from visual_vocab.spider.spanish_dict import SpanishDict


KeywordExtractor = Callable[[str], List[str]]


def lookup_with_fallback(
    word: str,
    dictionary: SpanishDict,
    keywords_for: KeywordExtractor,
    attempts: int,
    verbose: bool = False,
) -> DictionaryEntry:
    """Look ``word`` up; on an empty page retry with up to ``attempts`` keywords.

    Returns the first entry with definitions, raises NoCandidates otherwise.
    """
    entry = dictionary.lookup(word)
    if entry.definitions:
        return entry
    if attempts <= 0:
        raise NoCandidates(f"no dictionary definitions for {word!r}")

    # the word itself was just looked up
    keywords = [k for k in keywords_for(word) if k.lower() != word.strip().lower()][:attempts]
    for keyword in keywords:
        if verbose:
            print(f"[visual] [retry] {word!r}: looking up keyword {keyword!r}")
        entry = dictionary.lookup(keyword)
        if entry.definitions:
            return entry
    raise NoCandidates(f"no dictionary definitions for {word!r} or keywords {keywords}")


def collect_examples(entry: DictionaryEntry) -> List[Tuple[str, str]]:
    """(labelled definition, example) pairs from definitions that carry examples."""
    pairs: List[Tuple[str, str]] = []
    for definition in entry.definitions:
        examples = examples_of(definition)
        if not examples:
            continue
        # only GroupedDefinitionWithExamples carries examples
        label = f"{definition.text} ({definition.group})"
        for example in examples:
            if example.text:
                pairs.append((label, example.text))
    return pairs


def pick_image(
    candidates: Sequence[ImageCandidate],
    download: Callable[[ImageCandidate], bytes],
    rng: random.Random,
    verbose: bool = False,
) -> bytes:
    """Download candidates in random order until one succeeds."""
    order = list(candidates)
    rng.shuffle(order)
    for candidate in order:
        try:
            return download(candidate)
        except VisualVocabError as e:
            if verbose:
                print(f"[visual] [warn] image download failed, trying next: {e}")
    raise NoCandidates(f"all {len(order)} image downloads failed")


def successful_cards(results: Iterable[EnrichmentResult]) -> List[VisualFlashcard]:
    """Cards of the successful results, in result order."""
    return [r.card for r in results if r.card is not None]


class VisualVocabEnricher:
    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        images: Optional[GoogleImageSearch] = None,
        dictionary: Optional[SpanishDict] = None,
        reranker: Optional[Reranker] = None,
        keywords: Optional[KeywordExtractor] = None,
        verbose: bool = False,
    ) -> None:
        self.config = config or PipelineConfig()
        self.verbose = verbose
        if images is None or dictionary is None:
            client = get_client(self.config)
            images = images or GoogleImageSearch(client, verbose=verbose)
            dictionary = dictionary or SpanishDict(client, verbose=verbose)
        self.images = images
        self.dictionary = dictionary
        self.reranker = reranker or get_reranker(self.config.model_name)
        self.keywords = keywords or self._extract_keywords

    def _extract_keywords(self, phrase: str) -> List[str]:
        return extract_keywords(phrase, self.reranker, top_n=self.config.keyword_count)

    def _rng_for(self, index: int) -> random.Random:
        seed = self.config.seed
        return random.Random(None if seed is None else f"{seed}:{index}")

    def enrich_one(self, index: int, card: Flashcard) -> EnrichmentResult:
        """Enrich one flashcard; failures come back as a failed result."""
        set_thread_log_context(card.word)
        stage = TaskStage.PENDING
        try:
            stage = TaskStage.FETCHING_IMAGES
            candidates = self.images.search_up_to(card.word, self.config.image_pool_size)
            if not candidates:
                raise NoCandidates("no image candidates")

            stage = TaskStage.FETCHING_DICTIONARY
            entry = lookup_with_fallback(
                card.word,
                self.dictionary,
                self.keywords,
                self.config.fallback_attempts,
                verbose=self.verbose,
            )

            stage = TaskStage.RANKING
            pairs = collect_examples(entry)
            if not pairs:
                raise NoCandidates(f"no example sentences in {len(entry.definitions)} definitions")
            ranked = self.reranker.rank(card.word, [label for label, _ in pairs], limit=1, threshold=0.0)
            if not ranked:
                raise NoCandidates("no definition scored above 0")
            label, example = pairs[ranked[0].index]
            if self.verbose:
                print(f"[visual] [rank] {card.word!r} -> {label} ({ranked[0].score:.3f})")

            stage = TaskStage.PICKING_IMAGE
            image = pick_image(candidates, self.images.download, self._rng_for(index), verbose=self.verbose)

            visual = VisualFlashcard(
                word=card.word,
                definition=card.definition,
                image=image,
                example=example,
            )
            if self.verbose:
                print(f"[visual] [ok] {card.word!r}: {len(image):,} image bytes, example {example!r}")
            return EnrichmentResult.success(index, visual)
        except ModelLoadError:
            raise
        except VisualVocabError as e:
            print(f"[visual] [fail] {card.word!r} at {stage.value}: {e}")
            return EnrichmentResult.failure(index, card.word, stage, str(e))
        finally:
            clear_thread_log_context()

    def _collect(self, future: "Future[EnrichmentResult]", index: int, card: Flashcard) -> EnrichmentResult:
        try:
            return future.result()
        except ModelLoadError:
            raise
        except Exception as e:
            print(f"[visual] [fail] {card.word!r}: unexpected {e.__class__.__name__}: {e}")
            return EnrichmentResult.failure(index, card.word, TaskStage.FAILED, f"{e.__class__.__name__}: {e}")

    def enrich_batch(self, cards: Iterable[Flashcard]) -> List[EnrichmentResult]:
        """Enrich all cards concurrently, one result per card in input order."""
        cards = list(cards)
        if not cards:
            return []

        # Fail the whole run up front if the model cannot be built
        self.reranker.load()

        started = time.monotonic()
        results: List[Optional[EnrichmentResult]] = [None] * len(cards)
        executor = ThreadPoolExecutor(max_workers=len(cards), thread_name_prefix="visual")
        timed_out = False
        try:
            futures = {
                executor.submit(self.enrich_one, index, card): index
                for index, card in enumerate(cards)
            }
            done, not_done = wait(futures, timeout=self.config.run_deadline)
            for future in done:
                index = futures[future]
                results[index] = self._collect(future, index, cards[index])
            for future in not_done:
                index = futures[future]
                future.cancel()
                timed_out = True
                print(f"[visual] [fail] {cards[index].word!r}: timed out after {self.config.run_deadline}s")
                results[index] = EnrichmentResult.failure(
                    index,
                    cards[index].word,
                    TaskStage.FAILED,
                    f"timed out after {self.config.run_deadline}s",
                )
        finally:
            # Stuck requests are left to finish on their own after a deadline
            executor.shutdown(wait=not timed_out, cancel_futures=True)

        final = [r for r in results if r is not None]
        if self.verbose:
            ok = sum(1 for r in final if r.ok)
            print(f"[visual] [info] {ok}/{len(final)} words enriched in {time.monotonic() - started:.1f}s")
        return final
