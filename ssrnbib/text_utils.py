from __future__ import annotations

import calendar
import re
from datetime import datetime
from typing import Optional

from dateutil.parser import parse as parse_date
from unidecode import unidecode

from .config import SENTINEL_DATE
from .exceptions import DATE_PARSE_ERRORS, DECODE_ERRORS, PARSE_ERRORS


__all__ = [
    "strip_accents",
    "extract_surname",
    "bibkey_token",
    "month_token",
    "parse_date_or",
    "sentinel_date",
    "collapse_whitespace",
]


def strip_accents(s: str) -> str:
    """
    Transliterate a string to ASCII so names like "Müller" can be used inside
    a citation key.
    """
    try:
        return unidecode(s)
    except PARSE_ERRORS + DECODE_ERRORS:
        return s


def extract_surname(author: Optional[str]) -> str:
    """
    Return the surname of an SSRN author string.

    SSRN lists authors as "Surname, Given", so everything before the first
    comma is the surname. Names without a comma are returned unchanged.
    """
    if not author:
        return ""
    return str(author).split(",")[0].strip()


def bibkey_token(name: str) -> str:
    """
    Reduce a surname to characters that are safe in a BibTeX key.
    """
    return re.sub(r"[^A-Za-z0-9]", "", strip_accents(name))


def month_token(month: int) -> str:
    """
    Map a month number to the lowercase three letter abbreviation BibTeX
    expects for its month macros (6 -> "jun").
    """
    return calendar.month_abbr[month].lower()


def sentinel_date() -> datetime:
    return parse_date(SENTINEL_DATE)


def parse_date_or(value: Optional[str], fallback: Optional[datetime]) -> Optional[datetime]:
    """
    Parse a free-form date, returning ``fallback`` when the value is missing or
    cannot be interpreted.
    """
    if not value or not str(value).strip():
        return fallback
    try:
        return parse_date(str(value))
    except DATE_PARSE_ERRORS:
        return fallback


def collapse_whitespace(s: Optional[str]) -> str:
    return re.sub(r"\s+", " ", s or "").strip()
