"""Tests for the shared HTTP client."""

import threading

import pytest
import requests

from visual_vocab.common.config import PipelineConfig
from visual_vocab.common.errors import TransportError
from visual_vocab.spider.client import USER_AGENT, HttpClient

from tests.conftest import FakeSession, response


def _client(session, **kwargs):
    kwargs.setdefault("backoff", 0)
    return HttpClient(session=session, **kwargs)


class TestHttpClient:
    """Tests for HttpClient.get and its retry policy."""

    def test_sets_browser_headers(self):
        session = FakeSession()
        _client(session)
        assert session.headers["User-Agent"] == USER_AGENT
        assert session.headers["Accept-Encoding"].startswith("gzip, deflate")

    def test_advertises_brotli(self):
        pytest.importorskip("brotli")
        session = FakeSession()
        _client(session)
        assert "br" in session.headers["Accept-Encoding"].split(", ")

    def test_returns_text(self):
        session = FakeSession([response(200, "<html>ok</html>")])
        assert _client(session, timeout=5).get_text("https://example.com/a", params={"q": "luz"}) == "<html>ok</html>"
        assert session.calls == [("https://example.com/a", {"q": "luz"}, 5)]

    def test_retries_connection_errors(self):
        session = FakeSession([requests.ConnectionError("reset"), response(200, "ok")])
        assert _client(session).get_text("https://example.com/") == "ok"
        assert len(session.calls) == 2

    def test_server_errors_exhaust_attempts(self):
        session = FakeSession([response(500), response(502), response(503), response(200, "late")])
        with pytest.raises(TransportError) as exc_info:
            _client(session, max_attempts=3).get("https://example.com/")
        assert exc_info.value.status == 503
        assert exc_info.value.url == "https://example.com/"
        assert len(session.calls) == 3

    def test_rate_limit_is_retried(self):
        session = FakeSession([response(429), response(200, "ok")])
        assert _client(session).get_text("https://example.com/") == "ok"

    def test_not_found_is_not_retried(self):
        session = FakeSession([response(404), response(200, "ok")])
        with pytest.raises(TransportError) as exc_info:
            _client(session).get("https://example.com/missing")
        assert exc_info.value.status == 404
        assert len(session.calls) == 1

    def test_attempts_override(self):
        session = FakeSession([response(500), response(200, "ok")])
        with pytest.raises(TransportError):
            _client(session, max_attempts=3).get("https://example.com/", attempts=1)
        assert len(session.calls) == 1

    def test_empty_body_is_an_error(self):
        session = FakeSession([response(200, "", content=b"")])
        with pytest.raises(TransportError):
            _client(session).get_bytes("https://example.com/image.jpg")

    def test_get_bytes(self):
        session = FakeSession([response(200, content=b"\xff\xd8\xffdata")])
        assert _client(session).get_bytes("https://example.com/image.jpg") == b"\xff\xd8\xffdata"

    def test_per_host_limit(self):
        session = FakeSession(delay=0.02)
        client = _client(session, per_host_limit=2)
        threads = [
            threading.Thread(target=client.get, args=(f"https://example.com/{i}",))
            for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(session.calls) == 8
        assert session.max_active <= 2

    def test_from_config(self):
        config = PipelineConfig(request_timeout=7.5, max_attempts=5, retry_backoff=0.5, per_host_limit=3)
        client = HttpClient.from_config(config)
        assert (client.timeout, client.max_attempts, client.backoff, client.per_host_limit) == (7.5, 5, 0.5, 3)
