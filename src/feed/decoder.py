# src/feed/decoder.py

"""Spreadsheet decoding for the store feed."""

import io
import logging
from typing import Any

import pandas as pd

logger = logging.getLogger("door_catalog.feed")


def decode_workbook(content: bytes) -> list[dict[str, Any]]:
    """Decode an XLS/XLSX payload into a list of row dicts.

    Only the first sheet is read and its first row is used as the
    header.  Empty cells come back as ``None``.  pandas picks the
    engine from the file signature (xlrd for legacy ``.xls``,
    openpyxl for ``.xlsx``) and raises on undecodable payloads.
    """
    if not content:
        msg = "Feed payload is empty"
        raise ValueError(msg)

    frame = pd.read_excel(
        io.BytesIO(content),
        sheet_name=0,
        header=0,
        dtype=object,
    )
    frame.columns = [str(c).strip() for c in frame.columns]
    frame = frame.astype(object).where(frame.notna(), None)

    rows: list[dict[str, Any]] = frame.to_dict(orient="records")
    logger.debug(
        "Decoded %d rows with %d columns", len(rows), len(frame.columns)
    )
    return rows
