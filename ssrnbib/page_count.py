from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .exceptions import NUMERIC_ERRORS
from .models import PageCount


def _single_total(match: re.Match) -> PageCount:
    total = int(match.group(1))
    return PageCount(pages=f"1--{total}", count=total)


def _explicit_range(match: re.Match) -> PageCount:
    first, last = (int(p) for p in match.group(1).split("-"))
    return PageCount(pages=match.group(1), count=last - first)


@dataclass(frozen=True)
class PageMatcher:
    """
    One way of reading a page count from page text.

    ``stripped`` selects which rendering of the page the pattern runs on: the
    text with every string stripped and glued together, or the raw text with
    its original whitespace.
    """
    name: str
    pattern: re.Pattern
    stripped: bool
    build: Callable[[re.Match], PageCount]

    def match(self, stripped_text: str, raw_text: str) -> Optional[PageCount]:
        m = self.pattern.search(stripped_text if self.stripped else raw_text)
        if not m:
            return None
        try:
            result = self.build(m)
        except NUMERIC_ERRORS:
            return None
        return PageCount(pages=result.pages, count=result.count, matcher=self.name)


# Evaluated in order; the first matcher that succeeds decides the page count
PAGE_MATCHERS: Sequence[PageMatcher] = (
    PageMatcher(
        name="number_of_pages",
        pattern=re.compile(r"Number of pages:\s+(\d+)", re.IGNORECASE),
        stripped=True,
        build=_single_total,
    ),
    PageMatcher(
        name="pp_range",
        pattern=re.compile(r"pp.\s+(\d+-\d+)", re.IGNORECASE),
        stripped=True,
        build=_explicit_range,
    ),
    PageMatcher(
        name="n_pages",
        pattern=re.compile(r"(\d+) Pages", re.IGNORECASE),
        stripped=False,
        build=_single_total,
    ),
)


def match_page_count(
        stripped_text: str,
        raw_text: Optional[str] = None,
        matchers: Sequence[PageMatcher] = PAGE_MATCHERS,
) -> Optional[PageCount]:
    """
    Run the matchers in priority order and return the first page count found,
    or None when no pattern applies. ``raw_text`` defaults to
    ``stripped_text``.
    """
    if raw_text is None:
        raw_text = stripped_text
    for matcher in matchers:
        found = matcher.match(stripped_text, raw_text)
        if found is not None:
            return found
    return None
