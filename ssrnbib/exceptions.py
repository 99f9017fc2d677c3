from __future__ import annotations

import socket

import requests
from dateutil.parser import ParserError

__all__ = [
    "InvalidIdentifierError",
    "HTTP_ERRORS",
    "INVALID_REQUEST_ERRORS",
    "TIMEOUT_ERRORS",
    "NETWORK_ERRORS",
    "DECODE_ERRORS",
    "PARSE_ERRORS",
    "DATE_PARSE_ERRORS",
    "NUMERIC_ERRORS",
    "FILE_WRITE_ERRORS",
]


class InvalidIdentifierError(ValueError):
    """
    Raised when an input is neither an SSRN abstract number nor an http(s) URL
    with a host.
    Never retried: the same input would fail the same way.
    """


# errors raised by requests when an HTTP request fails or a URL cannot be reached
HTTP_ERRORS = (requests.exceptions.RequestException,)

# requests errors caused by the URL itself; the same request would fail again
INVALID_REQUEST_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
)

# errors that signal an operation has taken too long and hit a timeout at the OS or socket level
TIMEOUT_ERRORS = (TimeoutError, socket.timeout)

# umbrella group for network-related failures, combining HTTP issues and timeouts
NETWORK_ERRORS = HTTP_ERRORS + TIMEOUT_ERRORS + (ConnectionError,)

# errors that occur when converting response bytes into text using a specific encoding
DECODE_ERRORS = (UnicodeDecodeError, UnicodeError)

# errors raised while interpreting page content or tag attributes
PARSE_ERRORS = (ValueError, TypeError, KeyError, AttributeError)

# dateutil raises ParserError for unknown formats, OverflowError for absurd
# years, and TypeError when the tag had no content at all
DATE_PARSE_ERRORS = (ParserError, ValueError, OverflowError, TypeError)

# numeric conversion errors raised during id or page-count parsing
NUMERIC_ERRORS = (TypeError, ValueError, OverflowError)

# file write operation errors including permissions, disk full, and encoding issues
FILE_WRITE_ERRORS = (OSError, TypeError, UnicodeEncodeError)
