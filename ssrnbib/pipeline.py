from __future__ import annotations

from typing import Callable, Optional

from .bibtex_build import build_record
from .extractor import extract_metadata, extract_page_count, find_coauthors, make_soup
from .http_utils import RetryPolicy, fetch_page, http_get_text
from .id_utils import Identifier, extract_abstract_id
from .log_utils import logger, LogSource, LogCategory
from .models import SsrnEntry


def build_entry(url: str, html: str) -> SsrnEntry:
    """
    Turn an already downloaded abstract page into an entry. Pure with respect
    to its inputs: the same page always yields the same entry.
    """
    soup = make_soup(html)
    ssrn_id = extract_abstract_id(url) or ""
    if not ssrn_id:
        logger.warn(f"No abstract id in {url}", source=LogSource.SSRN, category=LogCategory.PARSE)

    meta = extract_metadata(soup)
    pages = extract_page_count(soup)
    coauthors = find_coauthors(soup)
    record = build_record(meta, pages, ssrn_id)

    logger.success(f"Built {record.key} ({len(record.authors)} author(s))",
                   source=LogSource.SSRN, category=LogCategory.RECORD)
    return SsrnEntry(url=url, record=record, coauthors=coauthors, html=soup.prettify())


def get_ssrn_entry(
        identifier: Identifier,
        policy: Optional[RetryPolicy] = None,
        get_text: Callable[[str], str] = http_get_text,
) -> SsrnEntry:
    """
    Fetch an SSRN abstract page by number or URL and build its citation.

    Raises InvalidIdentifierError for unusable input and re-raises the last
    network error when every fetch attempt fails.
    """
    url, html = fetch_page(identifier, policy=policy, get_text=get_text)
    return build_entry(url, html)
