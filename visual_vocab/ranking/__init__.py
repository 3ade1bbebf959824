"""Embedding-based ranking: reranker and keyword extraction."""

from visual_vocab.ranking.reranker import (
    Reranker,
    cosine_similarity,
    select_top,
    get_reranker,
)
from visual_vocab.ranking.keywords import (
    STOP_WORDS,
    candidate_keywords,
    extract_keywords,
)

__all__ = [
    # reranker
    "Reranker",
    "cosine_similarity",
    "select_top",
    "get_reranker",
    # keywords
    "STOP_WORDS",
    "candidate_keywords",
    "extract_keywords",
]
