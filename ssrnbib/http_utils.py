from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.util.retry import Retry

from .config import (
    FETCH_BACKOFF_INITIAL,
    FETCH_BACKOFF_MAX,
    FETCH_BACKOFF_MULTIPLIER,
    FETCH_MAX_ATTEMPTS,
    HTTP_RETRY_STATUS_CODES,
    HTTP_TIMEOUT_DEFAULT,
    HTTP_TRANSPORT_RETRIES,
)
from .exceptions import DECODE_ERRORS, INVALID_REQUEST_ERRORS, NETWORK_ERRORS
from .id_utils import Identifier, resolve_url
from .log_utils import logger, LogSource, LogCategory

T = TypeVar('T')

# SSRN serves abstract pages to browser user agents
DEFAULT_BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/119.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# Global session for connection pooling
_SESSION = requests.Session()

_RETRY_STRATEGY = Retry(
    total=HTTP_TRANSPORT_RETRIES,
    backoff_factor=0.5,
    status_forcelist=HTTP_RETRY_STATUS_CODES,
    allowed_methods=["GET"],
    raise_on_status=False,
)
_ADAPTER = HTTPAdapter(max_retries=_RETRY_STRATEGY)
_SESSION.mount("https://", _ADAPTER)
_SESSION.mount("http://", _ADAPTER)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff for a blocking call.

    After the n-th failed attempt the policy waits
    ``min(max_delay, base_delay * multiplier ** (n - 1))`` seconds, so the
    defaults give 4, 8, 16 and 32 seconds between five attempts. ``sleep`` is
    injectable so tests can record the waits instead of blocking. Errors in
    ``never_retry`` fail on the first attempt even when they are also listed in
    ``retry_on``.
    """
    max_attempts: int = FETCH_MAX_ATTEMPTS
    base_delay: float = FETCH_BACKOFF_INITIAL
    multiplier: float = FETCH_BACKOFF_MULTIPLIER
    max_delay: float = FETCH_BACKOFF_MAX
    retry_on: Tuple[type, ...] = NETWORK_ERRORS
    never_retry: Tuple[type, ...] = INVALID_REQUEST_ERRORS
    sleep: Callable[[float], None] = time.sleep

    def delay_for(self, failed_attempts: int) -> float:
        return min(self.max_delay, self.base_delay * self.multiplier ** (failed_attempts - 1))

    def _log_retry(self, state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        wait = state.next_action.sleep if state.next_action else 0.0
        logger.warn(
            f"Attempt {state.attempt_number}/{self.max_attempts} failed ({exc}); trying again in {wait:.0f}s",
            source=LogSource.SSRN,
            category=LogCategory.RETRY,
        )

    def retrying(self) -> Retrying:
        """
        Build the tenacity controller for one call; the last exception is
        re-raised once attempts run out.
        """
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, exp_base=self.multiplier, max=self.max_delay),
            retry=retry_if_exception_type(self.retry_on) & retry_if_not_exception_type(self.never_retry),
            before_sleep=self._log_retry,
            sleep=self.sleep,
            reraise=True,
        )

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        for attempt in self.retrying():
            with attempt:
                return fn(*args, **kwargs)
        # unreachable with reraise=True
        raise RuntimeError("retry loop exited without a result")


DEFAULT_RETRY_POLICY = RetryPolicy()


def http_fetch_bytes(url: str, headers: Dict[str, str], timeout: float) -> bytes:
    """
    Perform a single HTTP GET and return the response body as raw bytes,
    raising for error status codes.
    """
    resp = _SESSION.get(url, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp.content


def decode_html_bytes(raw: bytes) -> str:
    """
    Choose a suitable decoding by inspecting byte order marks, trying UTF-8
    first, and falling back to Latin-1 when needed.
    """
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw.decode("utf-8-sig")
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        # the utf-16 codec reads the byte order from the BOM and drops it
        try:
            return raw.decode("utf-16")
        except DECODE_ERRORS:
            pass
    try:
        return raw.decode("utf-8")
    except DECODE_ERRORS:
        return raw.decode("latin-1", errors="replace")


def http_get_text(url: str, timeout: float = HTTP_TIMEOUT_DEFAULT) -> str:
    """
    Download an HTML page with browser-like headers and return it as text.
    """
    raw = http_fetch_bytes(url, DEFAULT_BROWSER_HEADERS.copy(), timeout)
    return decode_html_bytes(raw)


def fetch_page(
        identifier: Identifier,
        policy: Optional[RetryPolicy] = None,
        get_text: Callable[[str], str] = http_get_text,
) -> Tuple[str, str]:
    """
    Resolve an abstract id or URL and download the page under the retry
    policy, returning ``(url, html)``. Network errors that survive every
    attempt propagate to the caller.
    """
    policy = policy or DEFAULT_RETRY_POLICY
    url = resolve_url(identifier)
    logger.info(f"Fetching {url}", source=LogSource.SSRN, category=LogCategory.FETCH)
    html = policy.call(get_text, url)
    logger.success(f"Fetched {len(html)} characters", source=LogSource.SSRN, category=LogCategory.FETCH)
    return url, html
