"""Keyword extraction for dictionary lookups of multi-word entries.

Vocabulary lists often hold phrases ("la luz del sol", "to turn on the
light") that have no dictionary page of their own. The content words of the
phrase are scored against the whole phrase with the embedding model and the
closest ones are looked up instead.
"""

import re
from typing import List

from visual_vocab.common.utils import unique_preserve_order
from visual_vocab.ranking.reranker import Reranker


_WORD_RE = re.compile(r"[^\W\d_]+", re.UNICODE)

STOP_WORDS = frozenset({
    # Spanish
    "a", "al", "algo", "como", "con", "de", "del", "el", "en", "es", "esa", "ese", "eso",
    "esta", "este", "esto", "la", "las", "le", "les", "lo", "los", "me", "mi", "muy", "más",
    "no", "nos", "o", "para", "pero", "por", "que", "qué", "se", "si", "sin", "su", "sus",
    "te", "tu", "un", "una", "unas", "unos", "y", "ya",
    # English
    "an", "and", "are", "as", "at", "be", "by", "for", "from", "in", "is", "it", "its",
    "of", "on", "or", "the", "that", "this", "to", "with",
})


def candidate_keywords(phrase: str) -> List[str]:
    """Content words of ``phrase`` in order, lowercased and deduplicated."""
    words = [w.lower() for w in _WORD_RE.findall(phrase or "")]
    return unique_preserve_order(w for w in words if len(w) > 1 and w not in STOP_WORDS)


def extract_keywords(phrase: str, reranker: Reranker, top_n: int = 3) -> List[str]:
    """Most salient words of ``phrase``, best first, at most ``top_n``."""
    candidates = candidate_keywords(phrase)
    if len(candidates) <= 1:
        return candidates[:top_n]
    ranked = reranker.rank(phrase, candidates, limit=top_n, threshold=-1.0)
    return [candidates[r.index] for r in ranked]
