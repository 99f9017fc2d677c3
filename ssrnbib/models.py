from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class PageCount:
    """
    Page range as it should appear in BibTeX together with the number of pages
    and the name of the pattern that found it.
    """
    pages: str
    count: int
    matcher: str = ""


@dataclass
class PageMetadata:
    """
    Values collected while walking the <meta> tags of an abstract page.
    Filled in tag by tag, so every field starts empty.
    """
    title: str = ""
    online_date: Optional[datetime] = None
    publication_date: Optional[datetime] = None
    publication_date_str: str = ""
    authors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CitationRecord:
    """
    A finished citation for one SSRN paper. Values are stored plain; BibTeX
    quoting and bracing happen when the record is formatted.
    """
    key: str
    authors: Tuple[str, ...]
    title: str
    pages: Optional[str]
    page_count: Optional[int]
    journal: str
    publisher: str
    note: str
    month: str
    year: str
    ssrn_id: str
    date: datetime
    date_str: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """
        Flatten the record into an ordered mapping of BibTeX-ready values,
        keyed the way a single-row table of the record should be labelled.
        """
        return OrderedDict([
            ("bib_entry", f"@article{{{self.key}"),
            ("authors", "{" + " and ".join(self.authors) + "}"),
            ("title", "{{" + self.title + "}}"),
            ("pages", f"pages = {{{self.pages}}}" if self.pages else ""),
            ("journal", "{" + self.journal + "}"),
            ("publisher", "{" + self.publisher + "}"),
            ("note", '"\\url{' + self.note + '}"'),
            ("month", self.month),
            ("year", self.year),
            ("ssrn_no", self.ssrn_id),
            ("date_str", self.date_str),
            ("date", self.date),
            ("pagescount", self.page_count),
        ])


@dataclass(frozen=True)
class SsrnEntry:
    """
    Everything one lookup produces: the fetched URL, the record, the
    co-author id to name mapping, and the prettified page source.
    """
    url: str
    record: CitationRecord
    coauthors: Dict[int, str]
    html: str = ""

    @property
    def key(self) -> str:
        return self.record.key

    @property
    def bibtex(self) -> str:
        # avoid circular imports
        from .bibtex_build import format_bibtex
        return format_bibtex(self.record)
