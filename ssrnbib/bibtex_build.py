from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .config import (
    BIBKEY_ET_AL,
    BIBKEY_NO_AUTHOR_PREFIX,
    DEFAULT_ENTRY_TYPE,
    DEFAULT_JOURNAL,
    DEFAULT_PUBLISHER,
)
from .id_utils import permanent_url
from .models import CitationRecord, PageCount, PageMetadata, SsrnEntry
from .text_utils import bibkey_token, extract_surname, month_token, sentinel_date


def make_bibkey(authors: Sequence[str], year: str, ssrn_id: str = "") -> str:
    """
    Build the citation key from author surnames and the year.

    One author gives ``Surname2018``, two give ``FirstSecond2018``, and more
    than two give ``FirstEtAl2018``. A paper without authors is keyed by its
    SSRN number instead.
    """
    surnames = [bibkey_token(extract_surname(a)) for a in authors]
    if not surnames:
        return f"{BIBKEY_NO_AUTHOR_PREFIX}{ssrn_id}{year}"
    if len(surnames) == 1:
        return f"{surnames[0]}{year}"
    if len(surnames) == 2:
        return f"{surnames[0]}{surnames[1]}{year}"
    return f"{surnames[0]}{BIBKEY_ET_AL}{year}"


def build_record(meta: PageMetadata, pages: Optional[PageCount], ssrn_id: str) -> CitationRecord:
    """
    Freeze the values collected from a page into a citation record, choosing
    the publication date over the online date and the sentinel last.
    """
    date = meta.publication_date or meta.online_date or sentinel_date()
    year = str(date.year)
    return CitationRecord(
        key=make_bibkey(meta.authors, year, ssrn_id),
        authors=tuple(meta.authors),
        title=meta.title,
        pages=pages.pages if pages else None,
        page_count=pages.count if pages else None,
        journal=DEFAULT_JOURNAL,
        publisher=DEFAULT_PUBLISHER,
        note=permanent_url(ssrn_id),
        month=month_token(date.month),
        year=year,
        ssrn_id=ssrn_id,
        date=date,
        date_str=meta.publication_date_str,
    )


def format_bibtex(record: CitationRecord) -> str:
    """
    Render a record as a BibTeX entry, one field per line, leaving out the
    pages line when no page count was found. The month is written as a bare
    macro and the year as a bare number.
    """
    lines: List[str] = [
        f"@{DEFAULT_ENTRY_TYPE}{{{record.key},",
        f"author = {{{' and '.join(record.authors)}}},",
        f"title = {{{{{record.title}}}}},",
    ]
    if record.pages:
        lines.append(f"pages = {{{record.pages}}},")
    lines.extend([
        f"journal = {{{record.journal}}},",
        f"publisher = {{{record.publisher}}},",
        f'note = "\\url{{{record.note}}}",',
        f"month = {record.month},",
        f"year = {record.year}",
        "}",
    ])
    return "\n".join(lines)


def format_author_roster(title: str, coauthors: Dict[int, str], author_count: int) -> str:
    """
    Print-ready block with the paper title followed by every author found on
    the page and their SSRN author id.
    """
    prefix = "Author's names:\n" if author_count > 1 else "Author's name:"
    lines = [title, "", prefix]
    lines.extend(f"{name} ({author_id})" for author_id, name in coauthors.items())
    return "\n".join(lines)


def render_report(entry: SsrnEntry) -> str:
    roster = format_author_roster(entry.record.title, entry.coauthors, len(entry.record.authors))
    return f"\n{roster}\n\nBibtex:\n\n{format_bibtex(entry.record)}\n\n{entry.url}\n"
