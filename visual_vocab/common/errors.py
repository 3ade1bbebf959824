"""Error types raised by the fetchers, the reranker and the orchestrator."""

from typing import Optional


class VisualVocabError(Exception):
    """Base class for every error this package raises on purpose."""


class TransportError(VisualVocabError):
    """Network failure, timeout or non-2xx status. Safe to retry."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        self.url = url
        self.status = status
        suffix = f" (status {status})" if status is not None else ""
        super().__init__(f"{message}{suffix}: {url}")


class PayloadNotFound(VisualVocabError):
    """The page loaded but the expected script block or section is missing."""


class PayloadMalformed(VisualVocabError):
    """The embedded payload could not be parsed or has an unexpected shape."""


class NoCandidates(VisualVocabError):
    """Nothing usable was recovered for a word (no images, no examples)."""


class ModelError(VisualVocabError):
    """The embedding model failed during inference."""


class ModelLoadError(ModelError):
    """The embedding model could not be constructed at all."""


class PipelineError(VisualVocabError):
    """A pipeline stage received input it cannot handle."""


__all__ = [
    "VisualVocabError",
    "TransportError",
    "PayloadNotFound",
    "PayloadMalformed",
    "NoCandidates",
    "ModelError",
    "ModelLoadError",
    "PipelineError",
]
