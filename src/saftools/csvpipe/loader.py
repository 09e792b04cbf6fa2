from __future__ import annotations

import codecs
import csv as _csv
import io
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

from .mapping import row_mapping
from .types import MalformedSheetError

DEFAULT_ENCODING = "windows-1252"


def check_encoding(label: str) -> str:
    """Return the canonical codec name for `label` or raise LookupError."""
    return codecs.lookup(label).name


def read_text(csv_path: Path, encoding: str = DEFAULT_ENCODING) -> str:
    # undecodable bytes become U+FFFD instead of aborting the run
    data = Path(csv_path).read_bytes()
    return data.decode(check_encoding(encoding), errors="replace")


def read_csv_rows(csv_path, encoding: str = DEFAULT_ENCODING) -> Tuple[List[str], List[List[str]]]:
    """Read the sheet into (headers, rows of cells), in file order."""
    text = read_text(Path(csv_path), encoding)
    reader = _csv.reader(io.StringIO(text, newline=""))
    headers = next(reader, None)
    if headers is None:
        raise MalformedSheetError(f"{csv_path}: empty spreadsheet (no header row)")
    rows = [cells for cells in reader if cells]
    return headers, rows


def iter_row_mappings(headers: List[str], rows: List[List[str]]) -> Iterator[Tuple[int, Dict[str, str]]]:
    for i, cells in enumerate(rows):
        yield i, row_mapping(headers, cells)
