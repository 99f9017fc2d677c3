from __future__ import annotations

import re
from typing import Optional, Union
from urllib.parse import urlparse

from .config import SSRN_ABSTRACT_BASE, SSRN_PERMANENT_BASE
from .exceptions import InvalidIdentifierError

Identifier = Union[int, str]

_ABSTRACT_ID_RE = re.compile(r"abstract(_id)?=(\d+)", re.IGNORECASE)
_AUTHOR_ID_RE = re.compile(r"per_id=(\d+)", re.IGNORECASE)


def is_url(value: str) -> bool:
    return value.lower().startswith(("https://", "http://"))


def normalize_identifier(value: Identifier) -> Identifier:
    """
    Coerce user input into either an integer abstract id or a URL string.

    Integers pass through, URLs are returned stripped, and numeric strings such
    as " 3197365 " become integers. Anything else raises
    InvalidIdentifierError.
    """
    if isinstance(value, bool):
        raise InvalidIdentifierError(f"Not an SSRN identifier: {value!r}")
    if isinstance(value, int):
        if value <= 0:
            raise InvalidIdentifierError(f"SSRN abstract ids are positive: {value}")
        return value
    if not isinstance(value, str):
        raise InvalidIdentifierError(f"Not an SSRN identifier: {value!r}")

    text = value.strip()
    if is_url(text):
        if not urlparse(text).hostname:
            raise InvalidIdentifierError(f"URL has no host: {value!r}")
        return text
    if text.isdigit():
        return normalize_identifier(int(text))
    raise InvalidIdentifierError(f"Not an SSRN number or URL: {value!r}")


def ssrn_url_for(abstract_id: int) -> str:
    """
    Build the canonical abstract page URL for an SSRN id.
    """
    return f"{SSRN_ABSTRACT_BASE}{abstract_id}"


def resolve_url(identifier: Identifier) -> str:
    """
    Turn any accepted identifier into the URL that should be fetched.
    """
    normalized = normalize_identifier(identifier)
    if isinstance(normalized, int):
        return ssrn_url_for(normalized)
    return normalized


def extract_abstract_id(url: Optional[str]) -> Optional[str]:
    """
    Pull the abstract number out of an SSRN URL, accepting both the
    ``abstract_id=`` and the short ``abstract=`` forms.
    """
    if not url:
        return None
    m = _ABSTRACT_ID_RE.search(url)
    return m.group(2) if m else None


def permanent_url(abstract_id: str) -> str:
    return f"{SSRN_PERMANENT_BASE}{abstract_id}"


def extract_author_id(href: Optional[str]) -> Optional[int]:
    """
    Return the numeric author id from an author page link, or None when the
    link does not carry one.
    """
    if not href:
        return None
    m = _AUTHOR_ID_RE.search(href)
    return int(m.group(1)) if m else None
