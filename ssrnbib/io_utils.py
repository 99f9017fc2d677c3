from __future__ import annotations

import os

import pandas as pd

from .log_utils import logger, LogSource, LogCategory
from .models import CitationRecord, SsrnEntry


def record_to_frame(record: CitationRecord) -> pd.DataFrame:
    """
    Lay a record out as a one-column table: one row per field, the column
    named after the citation key.
    """
    return pd.DataFrame.from_dict(record.to_dict(), orient="index", columns=[record.key])


def write_bibtex_file(entry: SsrnEntry, out_dir: str) -> str:
    """
    Write the entry's BibTeX to ``<out_dir>/<key>.bib``, replacing an existing
    file of the same name, and return the path written.
    """
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"{entry.key}.bib")
    with open(path, "w", encoding="utf-8") as f:
        f.write(entry.bibtex + "\n")
    logger.success(f"Saved {path}", source=LogSource.SYSTEM, category=LogCategory.SAVE)
    return path
