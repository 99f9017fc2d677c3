import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock, patch

import pytest
import requests

from ssrnbib import http_utils
from ssrnbib.exceptions import InvalidIdentifierError
from ssrnbib.http_utils import RetryPolicy


class FlakyFetcher:
    """
    Stand-in for the HTTP GET that fails a fixed number of times first.
    """

    def __init__(self, failures, body="<html></html>", error=requests.exceptions.ConnectionError):
        self.failures = failures
        self.body = body
        self.error = error
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        if len(self.calls) <= self.failures:
            raise self.error(f"failure {len(self.calls)}")
        return self.body


def _policy(sleeps, **kwargs):
    return RetryPolicy(sleep=sleeps.append, **kwargs)


def test_retry_succeeds_on_fifth_attempt():
    """
    Test that four failures followed by a success return the page.
    """
    sleeps = []
    fetcher = FlakyFetcher(failures=4, body="page")
    assert _policy(sleeps).call(fetcher, "u") == "page"
    assert len(fetcher.calls) == 5
    assert sleeps == [4.0, 8.0, 16.0, 32.0]


def test_retry_gives_up_after_five_attempts():
    """
    Test that the last error propagates once every attempt has failed.
    """
    sleeps = []
    fetcher = FlakyFetcher(failures=5)
    with pytest.raises(requests.exceptions.ConnectionError, match="failure 5"):
        _policy(sleeps).call(fetcher, "u")
    assert len(fetcher.calls) == 5
    assert len(sleeps) == 4


def test_retry_first_attempt_success_does_not_sleep():
    sleeps = []
    assert _policy(sleeps).call(FlakyFetcher(failures=0, body="ok"), "u") == "ok"
    assert sleeps == []


def test_retry_delays_are_capped():
    sleeps = []
    policy = _policy(sleeps, max_attempts=8)
    policy.call(FlakyFetcher(failures=7), "u")
    assert sleeps == [4.0, 8.0, 16.0, 32.0, 64.0, 64.0, 64.0]
    assert [policy.delay_for(n) for n in range(1, 8)] == sleeps


def test_retry_does_not_retry_other_errors():
    """
    Test that errors outside the retry set fail immediately.
    """
    sleeps = []
    fetcher = FlakyFetcher(failures=3, error=KeyError)
    with pytest.raises(KeyError):
        _policy(sleeps).call(fetcher, "u")
    assert len(fetcher.calls) == 1
    assert sleeps == []


def test_retry_on_timeout():
    sleeps = []
    fetcher = FlakyFetcher(failures=2, body="late", error=requests.exceptions.Timeout)
    assert _policy(sleeps).call(fetcher, "u") == "late"
    assert sleeps == [4.0, 8.0]


def test_fetch_page_builds_url_from_id():
    fetcher = FlakyFetcher(failures=0, body="<html>ok</html>")
    url, html = http_utils.fetch_page(3197365, policy=_policy([]), get_text=fetcher)
    assert url == "https://papers.ssrn.com/sol3/papers.cfm?abstract_id=3197365"
    assert html == "<html>ok</html>"
    assert fetcher.calls == [url]


def test_fetch_page_keeps_url():
    fetcher = FlakyFetcher(failures=1)
    url, _ = http_utils.fetch_page("https://ssrn.com/abstract=5", policy=_policy([]), get_text=fetcher)
    assert url == "https://ssrn.com/abstract=5"
    assert fetcher.calls == [url, url]


def test_fetch_page_invalid_input_is_not_retried():
    fetcher = FlakyFetcher(failures=0)
    with pytest.raises(InvalidIdentifierError):
        http_utils.fetch_page("not-a-number", policy=_policy([]), get_text=fetcher)
    assert fetcher.calls == []


def test_fetch_page_hostless_url_is_not_retried():
    """
    Test that a URL without a host is refused before any request is sent.
    """
    sleeps = []
    fetcher = FlakyFetcher(failures=0)
    with pytest.raises(InvalidIdentifierError):
        http_utils.fetch_page("https://", policy=_policy(sleeps), get_text=fetcher)
    assert fetcher.calls == []
    assert sleeps == []


def test_retry_skips_invalid_request_errors():
    """
    Test that requests errors caused by the URL itself fail on the first
    attempt even though they are RequestException subclasses.
    """
    test_cases = [
        requests.exceptions.InvalidURL,
        requests.exceptions.MissingSchema,
        requests.exceptions.InvalidSchema,
    ]

    for error in test_cases:
        sleeps = []
        fetcher = FlakyFetcher(failures=3, error=error)
        with pytest.raises(error):
            _policy(sleeps).call(fetcher, "https://")
        assert len(fetcher.calls) == 1, f"{error.__name__} was retried {len(fetcher.calls) - 1} times"
        assert sleeps == [], f"{error.__name__} slept {sleeps}"


class _UnavailableHandler(BaseHTTPRequestHandler):
    """
    Answers every GET with 503 and counts the requests it received.
    """
    requests_seen = 0

    def do_GET(self):
        type(self).requests_seen += 1
        self.send_response(503)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        pass


def test_fetch_page_sends_one_request_per_attempt(monkeypatch):
    """
    Test against a local server that the session adds no retries of its own,
    so five attempts mean exactly five GETs.
    """
    monkeypatch.setenv("NO_PROXY", "127.0.0.1")
    monkeypatch.setenv("no_proxy", "127.0.0.1")
    _UnavailableHandler.requests_seen = 0
    server = ThreadingHTTPServer(("127.0.0.1", 0), _UnavailableHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        sleeps = []
        url = f"http://127.0.0.1:{server.server_address[1]}/sol3/papers.cfm?abstract_id=1"
        with pytest.raises(requests.exceptions.HTTPError):
            http_utils.fetch_page(url, policy=_policy(sleeps))
    finally:
        server.shutdown()
        server.server_close()
    assert _UnavailableHandler.requests_seen == 5
    assert sleeps == [4.0, 8.0, 16.0, 32.0]


def test_http_get_text_uses_browser_headers():
    """
    Test the session GET call and decoding without touching the network.
    """
    response = MagicMock()
    response.content = "Café".encode("utf-8")
    with patch.object(http_utils._SESSION, "get", return_value=response) as get:
        text = http_utils.http_get_text("https://ssrn.com/abstract=1", timeout=3.0)
    assert text == "Café"
    response.raise_for_status.assert_called_once()
    _, kwargs = get.call_args
    assert kwargs["timeout"] == 3.0
    assert kwargs["headers"]["User-Agent"].startswith("Mozilla/5.0")


def test_http_get_text_raises_http_errors():
    response = MagicMock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("503")
    with patch.object(http_utils._SESSION, "get", return_value=response):
        with pytest.raises(requests.exceptions.HTTPError):
            http_utils.http_get_text("https://ssrn.com/abstract=1")


def test_decode_html_bytes():
    """
    Test BOM handling and the Latin-1 fallback.
    """
    test_cases = [
        (b"\xef\xbb\xbfhello", "hello"),
        (b"\xff\xfe" + "hé".encode("utf-16le"), "hé"),
        (b"\xfe\xff" + "hé".encode("utf-16be"), "hé"),
        ("hé".encode("utf-8"), "hé"),
        ("hé".encode("latin-1"), "hé"),
    ]

    for raw, expected in test_cases:
        output = http_utils.decode_html_bytes(raw)
        assert output == expected, f"Expected {expected!r}, got {output!r}"
