from __future__ import annotations

from typing import Dict, Optional, Union

from bs4 import BeautifulSoup

from .config import (
    COAUTHOR_EXCLUDED_PREFIX,
    COAUTHOR_LINK_TITLE,
    META_AUTHOR,
    META_ONLINE_DATE,
    META_PUBLICATION_DATE,
    META_TITLE,
)
from .id_utils import extract_author_id
from .log_utils import logger, LogSource, LogCategory
from .models import PageCount, PageMetadata
from .page_count import match_page_count
from .text_utils import collapse_whitespace, parse_date_or, sentinel_date


def make_soup(html: Union[str, bytes]) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def extract_metadata(soup: BeautifulSoup) -> PageMetadata:
    """
    Walk the <meta> tags of an abstract page in document order and collect the
    title, the two dates, and the ordered author list.

    Dates never raise: an unreadable online date becomes the far-future
    sentinel, and an unreadable publication date falls back to the online date
    seen so far (or the sentinel when there is none).
    """
    meta = PageMetadata()

    for tag in soup.find_all("meta"):
        name = tag.get("name")
        content = tag.get("content")

        if name == META_TITLE:
            meta.title = collapse_whitespace(content)

        elif name == META_ONLINE_DATE:
            meta.online_date = parse_date_or(content, None)
            if meta.online_date is None:
                logger.warn(f"Unreadable online date {content!r}; using sentinel",
                            source=LogSource.SSRN, category=LogCategory.PARSE)
                meta.online_date = sentinel_date()

        elif name == META_PUBLICATION_DATE:
            fallback = meta.online_date or sentinel_date()
            meta.publication_date = parse_date_or(content, None)
            if meta.publication_date is None:
                logger.warn(f"Unreadable publication date {content!r}; using fallback {fallback:%Y-%m-%d}",
                            source=LogSource.SSRN, category=LogCategory.PARSE)
                meta.publication_date = fallback
            meta.publication_date_str = content or ""

        elif name == META_AUTHOR:
            author = collapse_whitespace(content)
            if author:
                meta.authors.append(author)

    if not meta.title:
        logger.warn("Page has no citation_title tag", source=LogSource.SSRN, category=LogCategory.PARSE)
    if not meta.authors:
        logger.warn("Page has no citation_author tags", source=LogSource.SSRN, category=LogCategory.PARSE)

    return meta


def extract_page_count(soup: BeautifulSoup) -> Optional[PageCount]:
    """
    Read the page count from the visible page text, trying each known phrasing
    in priority order.
    """
    found = match_page_count(soup.get_text(strip=True), soup.get_text(strip=False))
    if found is None:
        logger.info("No page count on page", source=LogSource.SSRN, category=LogCategory.PARSE)
    return found


def find_coauthors(soup: BeautifulSoup) -> Dict[int, str]:
    """
    Collect author ids and display names from the "View other papers by this
    author" links, keeping the first name seen for each id.
    """
    found: Dict[int, str] = {}
    for link in soup.find_all("a", href=True):
        if link.get("title") != COAUTHOR_LINK_TITLE:
            continue
        text = collapse_whitespace(link.get_text())
        if text.startswith(COAUTHOR_EXCLUDED_PREFIX):
            continue
        author_id = extract_author_id(link.get("href"))
        if author_id is None or author_id in found:
            continue
        found[author_id] = text
    return found
