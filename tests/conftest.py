"""Shared fakes: embedding model, image search, dictionary, HTTP session."""

import threading
import time
from types import SimpleNamespace
from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

from visual_vocab.common.errors import TransportError
from visual_vocab.ranking.reranker import Reranker
from visual_vocab.schema.base import DictionaryEntry, ImageCandidate


DIM = 16
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def bag_of_words(text: str) -> np.ndarray:
    """Deterministic stand-in embedding with a shared bias component."""
    vec = np.zeros(DIM)
    vec[0] = 1.0
    for token in text.lower().split():
        vec[1 + sum(map(ord, token)) % (DIM - 1)] += 1.0
    return vec


class FakeModel:
    """Mimics SentenceTransformer.encode and records concurrent use."""

    def __init__(self, vectors: Optional[Dict[str, Sequence[float]]] = None, delay: float = 0.0):
        self.vectors = dict(vectors or {})
        self.delay = delay
        self.calls: List[List[str]] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def encode(self, sentences, **kwargs):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            self.calls.append(list(sentences))
            return np.array([self.vectors.get(s, bag_of_words(s)) for s in sentences], dtype=np.float32)
        finally:
            with self._lock:
                self.active -= 1


def make_reranker(model: Optional[FakeModel] = None) -> Reranker:
    fake = model or FakeModel()
    return Reranker("fake-model", factory=lambda name: fake)


def make_candidate(n: int) -> ImageCandidate:
    return ImageCandidate(
        thumb_url=f"https://thumb.example/{n}.jpg",
        thumb_width=160,
        thumb_height=120,
        full_url=f"https://full.example/{n}.jpg",
        full_width=800,
        full_height=600,
        title=f"Image {n}",
        source_page_url=f"https://page.example/{n}",
    )


class FakeImages:
    """Image search returning canned candidates; downloads fail for listed URLs."""

    def __init__(self, candidates=None, failing_urls=(), by_query=None, delay=None, block=None):
        self.candidates = list(candidates or [])
        self.by_query = dict(by_query or {})
        self.failing_urls = set(failing_urls)
        self.delay = dict(delay or {})
        self.block = dict(block or {})
        self.downloads: List[str] = []
        self._lock = threading.Lock()

    def search_up_to(self, query: str, max_count: int) -> List[ImageCandidate]:
        if query in self.block:
            self.block[query].wait(timeout=5)
        if query in self.delay:
            time.sleep(self.delay[query])
        found = self.by_query.get(query, self.candidates)
        if isinstance(found, Exception):
            raise found
        return list(found)[:max_count]

    def download(self, candidate: ImageCandidate) -> bytes:
        with self._lock:
            self.downloads.append(candidate.full_url)
        if candidate.full_url in self.failing_urls:
            raise TransportError(candidate.full_url, "unexpected response", status=403)
        return PNG_BYTES


class FakeDictionary:
    def __init__(self, entries: Optional[Dict[str, DictionaryEntry]] = None):
        self.entries = dict(entries or {})
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def lookup(self, word: str) -> DictionaryEntry:
        with self._lock:
            self.calls.append(word)
        found = self.entries.get(word)
        if isinstance(found, Exception):
            raise found
        return found or DictionaryEntry(word=word, definitions=[])


class FakeSession:
    """requests.Session stand-in that replays scripted responses."""

    def __init__(self, responses=None, delay: float = 0.0):
        self.headers: Dict[str, str] = {}
        self.responses = list(responses or [])
        self.delay = delay
        self.calls: List[tuple] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.calls.append((url, params, timeout))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            item = self.responses.pop(0) if self.responses else response(200, "ok")
        try:
            if self.delay:
                time.sleep(self.delay)
            if isinstance(item, Exception):
                raise item
            return item
        finally:
            with self._lock:
                self.active -= 1


def response(status: int, text: str = "", content: Optional[bytes] = None):
    return SimpleNamespace(
        status_code=status,
        text=text,
        content=content if content is not None else text.encode("utf-8"),
    )


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def reranker(fake_model):
    return make_reranker(fake_model)
