"""Semantic reranking with a sentence-transformers model.

Candidates are scored by cosine similarity between their embedding and the
query embedding. The model is expensive to load and not safe to call from
several threads at once, so one instance is built lazily and every encode
call is serialized behind a lock.

Usage:
    from visual_vocab.ranking.reranker import get_reranker

    ranked = get_reranker().rank("luz", ["light (noun)", "power (noun)"], limit=1)
"""

import math
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from visual_vocab.common.config import DEFAULT_MODEL_NAME
from visual_vocab.common.errors import ModelError, ModelLoadError
from visual_vocab.schema.base import RankedCandidate


ModelFactory = Callable[[str], Any]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b|), clamped to [-1, 1].

    0.0 if either vector is zero; NaN if either holds a NaN or infinity, so
    the candidate is dropped by ``select_top`` instead of ranking high.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    with np.errstate(invalid="ignore", over="ignore"):
        dot = float(np.dot(va, vb))
        denom = math.sqrt(float(np.dot(va, va)) * float(np.dot(vb, vb)))
    if not math.isfinite(dot) or not math.isfinite(denom):
        return math.nan
    if denom == 0.0:
        return 0.0
    return max(-1.0, min(1.0, dot / denom))


def _sort_key(candidate: RankedCandidate):
    # NaN sorts after every real score
    score = candidate.score
    if math.isnan(score):
        return (math.inf, candidate.index)
    return (-score, candidate.index)


def select_top(scored: Sequence[RankedCandidate], limit: int = 0, threshold: float = 0.0) -> List[RankedCandidate]:
    """Keep scores above ``threshold``, best first (ties by index), at most ``limit`` (0 = all)."""
    kept = [c for c in scored if c.score > threshold]
    kept.sort(key=_sort_key)
    if limit == 0:
        return kept
    return kept[:limit]


class Reranker:
    """Owner of the shared embedding model."""

    def __init__(self, model_name: str = DEFAULT_MODEL_NAME, factory: Optional[ModelFactory] = None) -> None:
        self.model_name = model_name
        self._factory = factory
        self._model: Any = None
        self._load_lock = threading.Lock()
        self._encode_lock = threading.Lock()

    def _build(self) -> Any:
        if self._factory is not None:
            return self._factory(self.model_name)
        from sentence_transformers import SentenceTransformer

        return SentenceTransformer(self.model_name)

    @property
    def loaded(self) -> bool:
        return self._model is not None

    def load(self) -> Any:
        """Build the model on first use; later calls return the same instance."""
        if self._model is None:
            with self._load_lock:
                if self._model is None:
                    try:
                        model = self._build()
                    except Exception as e:
                        raise ModelLoadError(f"could not load embedding model {self.model_name}: {e}") from e
                    self._model = model
        return self._model

    def encode(self, texts: Sequence[str]) -> np.ndarray:
        """Embed texts, one encode call at a time process-wide."""
        model = self.load()
        with self._encode_lock:
            try:
                vectors = model.encode(
                    list(texts),
                    convert_to_numpy=True,
                    show_progress_bar=False,
                )
            except Exception as e:
                raise ModelError(f"embedding model failed on {len(texts)} texts: {e}") from e
        return np.asarray(vectors, dtype=np.float64)

    def rank(
        self,
        query: str,
        candidates: Sequence[str],
        limit: int = 0,
        threshold: float = 0.0,
    ) -> List[RankedCandidate]:
        """Rank ``candidates`` by similarity to ``query``.

        Args:
            query: Text to compare against
            candidates: Texts to score
            limit: Maximum results, 0 for all
            threshold: Only scores strictly above this are kept

        Returns:
            RankedCandidate list, best first, ties broken by original index
        """
        if not candidates:
            return []
        vectors = self.encode([query, *candidates])
        query_vector = vectors[0]
        scored = [
            RankedCandidate(index=i, score=cosine_similarity(query_vector, vector))
            for i, vector in enumerate(vectors[1:])
        ]
        return select_top(scored, limit=limit, threshold=threshold)


_RERANKERS: Dict[str, Reranker] = {}
_RERANKERS_LOCK = threading.Lock()


def get_reranker(model_name: str = DEFAULT_MODEL_NAME) -> Reranker:
    """Process-wide reranker for ``model_name``."""
    with _RERANKERS_LOCK:
        reranker = _RERANKERS.get(model_name)
        if reranker is None:
            reranker = Reranker(model_name)
            _RERANKERS[model_name] = reranker
        return reranker
