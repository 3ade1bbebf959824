"""Shared HTTP client for every fetcher.

One requests.Session (cookie jar, gzip/deflate/brotli decoding, one fixed browser
user agent) is reused by all worker threads so connections are pooled.
Requests to the same host are capped by a semaphore so a large batch does not
trip the remote sites' rate limiting.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional
from urllib.parse import urlparse

import requests
from requests.utils import DEFAULT_ACCEPT_ENCODING
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from visual_vocab.common.config import PipelineConfig
from visual_vocab.common.errors import TransportError


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36 Edg/113.0.1774.42"
)

# Client errors that are worth another attempt; any other 4xx is permanent
_RETRYABLE_CLIENT_STATUS = (408, 429)


def _is_retryable(exc: BaseException) -> bool:
    if not isinstance(exc, TransportError):
        return False
    status = exc.status
    if status is None or status >= 500:
        return True
    return status in _RETRYABLE_CLIENT_STATUS


class HttpClient:
    def __init__(
        self,
        user_agent: str = USER_AGENT,
        timeout: float = 20.0,
        max_attempts: int = 3,
        backoff: float = 1.0,
        per_host_limit: int = 8,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.per_host_limit = per_host_limit
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            # gzip and deflate, plus br when the brotli package is installed
            "Accept-Encoding": DEFAULT_ACCEPT_ENCODING,
        })
        self._hosts_lock = threading.Lock()
        self._host_slots: Dict[str, threading.BoundedSemaphore] = {}

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "HttpClient":
        return cls(
            timeout=config.request_timeout,
            max_attempts=config.max_attempts,
            backoff=config.retry_backoff,
            per_host_limit=config.per_host_limit,
        )

    @contextmanager
    def _host_slot(self, url: str) -> Iterator[None]:
        host = urlparse(url).netloc.lower()
        with self._hosts_lock:
            slot = self._host_slots.get(host)
            if slot is None:
                slot = threading.BoundedSemaphore(self.per_host_limit)
                self._host_slots[host] = slot
        with slot:
            yield

    def _get_once(self, url: str, params: Optional[Mapping[str, Any]]) -> requests.Response:
        with self._host_slot(url):
            try:
                resp = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise TransportError(url, f"request failed ({e.__class__.__name__}: {e})") from e
        if not 200 <= resp.status_code < 300:
            raise TransportError(url, "unexpected response", status=resp.status_code)
        return resp

    def get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        attempts: Optional[int] = None,
    ) -> requests.Response:
        """GET with exponential backoff on retryable transport errors.

        The last TransportError is re-raised once attempts run out.
        """
        retrying = Retrying(
            reraise=True,
            stop=stop_after_attempt(attempts or self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, min=0, max=8),
            retry=retry_if_exception(_is_retryable),
        )
        return retrying(self._get_once, url, params)

    def get_text(self, url: str, params: Optional[Mapping[str, Any]] = None) -> str:
        return self.get(url, params=params).text or ""

    def get_bytes(self, url: str, attempts: Optional[int] = None) -> bytes:
        content = self.get(url, attempts=attempts).content
        if not content:
            raise TransportError(url, "empty response body")
        return content


_CLIENT: Optional[HttpClient] = None
_CLIENT_LOCK = threading.Lock()


def get_client(config: Optional[PipelineConfig] = None) -> HttpClient:
    """Process-wide client, built once on first use."""
    global _CLIENT
    if _CLIENT is None:
        with _CLIENT_LOCK:
            if _CLIENT is None:
                _CLIENT = HttpClient.from_config(config or PipelineConfig())
    return _CLIENT
