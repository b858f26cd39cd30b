"""Spreadsheet export of crawled card records.

The output sheet has a fixed header; only five columns are filled from
crawled data, the rest are left empty for manual enrichment.  The header
is the 29 unique columns of the legacy sheet: its repeated ReleaseYear
column is written once and "Produc tId" is spelled "Product Id".

Every write goes to a sibling temp file that replaces the target only
once complete, so an interrupted write never damages the previous file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd

from ws_card_scraper.models import CardRecord

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Card Data"

# (header label, row key), in sheet order
COLUMNS: List[Tuple[str, str]] = [
    ("Product Id", "ProductId"),
    ("Set", "set"),
    ("Edition", "edition"),
    ("Series", "series"),
    ("Rarity", "rarity"),
    ("Material", "material"),
    ("ReleaseYear", "releaseYear"),
    ("Language", "language"),
    ("Card Name English", "cardNameEnglish"),
    ("Card Name Chinese", "cardNameChinese"),
    ("Card Name (Japanese)", "cardNameJapanese"),
    ("Card Number", "cardNumber"),
    ("Img Src", "imgSrc"),
    ("Value", "value"),
    ("Reference", "reference"),
    ("Remark", "remark"),
    *[(f"Remark{i}", f"remark{i}") for i in range(1, 11)],
    ("Enable", "enable"),
    ("P_Language", "pLanguage"),
    ("Id", "id"),
]

HEADERS = [header for header, _ in COLUMNS]
KEYS = [key for _, key in COLUMNS]


def build_row(record: CardRecord) -> Dict[str, Any]:
    """Map one record onto the export columns, everything else None."""
    row: Dict[str, Any] = dict.fromkeys(KEYS)
    row.update(
        {
            "imgSrc": record.image_url,
            "cardNameJapanese": record.name_japanese,
            "set": record.set,
            "rarity": record.rarity,
            "cardNumber": record.card_number,
        }
    )
    return row


def build_rows(records: Sequence[CardRecord]) -> List[Dict[str, Any]]:
    return [build_row(r) for r in records]


def build_frame(records: Sequence[CardRecord]) -> pd.DataFrame:
    """Return the export table with columns in sheet order."""
    return pd.DataFrame(build_rows(records), columns=KEYS, dtype=object)


def export(
    records: Sequence[CardRecord],
    path: str,
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> Path:
    """Write the header and one row per record to ``path``, replacing any existing file."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    frame = build_frame(records)
    tmp_path = out_path.with_name(out_path.stem + ".partial.xlsx")
    try:
        frame.to_excel(tmp_path, sheet_name=sheet_name, header=HEADERS, index=False, engine="openpyxl")
        os.replace(tmp_path, out_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.info("Wrote %s (%d rows)", out_path, len(records))
    return out_path


class CheckpointWriter:
    """Collects records as they are crawled and rewrites the sheet periodically.

    Every ``every`` records the full sheet is written, so an aborted crawl
    leaves its last checkpoint on disk.  ``close`` writes the final file.
    """

    def __init__(self, path: str, sheet_name: str = DEFAULT_SHEET_NAME, every: int = 50) -> None:
        self._path = path
        self._sheet_name = sheet_name
        self._every = every
        self._records: List[CardRecord] = []
        self._written = 0

    @property
    def records(self) -> List[CardRecord]:
        return list(self._records)

    @property
    def written(self) -> int:
        """Number of records in the file as last written."""
        return self._written

    def add(self, record: CardRecord) -> None:
        self._records.append(record)
        if self._every and len(self._records) % self._every == 0:
            logger.debug("Checkpoint at %d records", len(self._records))
            self._flush()

    def close(self) -> Path:
        return self._flush()

    def _flush(self) -> Path:
        path = export(self._records, self._path, self._sheet_name)
        self._written = len(self._records)
        return path
