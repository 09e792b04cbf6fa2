from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Sequence

from .types import (
    NO_QUALIFIER,
    OPTION_DELIMITER,
    VALUE_DELIMITER,
    FilenameColumn,
    HeaderLayout,
    MalformedSheetError,
    MetadataColumn,
    MetadataEntry,
)

log = logging.getLogger("saftools.csvpipe")

METADATA_PREFIX = "dc."

# Priority order; the first prefix that matches any header wins.
FILENAME_PREFIXES = ("filename", "file name", "bitstream")


# ============================================================================
# Header classification
# ============================================================================

def is_metadata_header(header: str) -> bool:
    return header.startswith(METADATA_PREFIX)


def parse_metadata_header(header: str) -> MetadataColumn:
    """
    "dc.title"             -> element="title", qualifier="none"
    "dc.title.alternative" -> element="title", qualifier="alternative"
    """
    tokens = header.split(".")
    if len(tokens) < 2:
        raise MalformedSheetError(f"Metadata header {header!r} has no element")
    # empty tokens are kept as-is: "dc..x" -> element "", "dc.title." -> qualifier ""
    element = tokens[1]
    qualifier = tokens[2] if len(tokens) > 2 else NO_QUALIFIER
    return MetadataColumn(header=header, element=element, qualifier=qualifier)


def find_filename_header(headers: Iterable[str]) -> str:
    """Pick the filename column by prefix priority, then by column order."""
    headers = list(headers)
    for prefix in FILENAME_PREFIXES:
        for h in headers:
            if h.startswith(prefix):
                return h
    raise MalformedSheetError(
        "No filename column (expected a header starting with "
        + ", ".join(repr(p) for p in FILENAME_PREFIXES)
        + ")"
    )


def filename_column(header: str) -> FilenameColumn:
    # first token is the prefix keyword itself
    options = header.split(OPTION_DELIMITER)[1:]
    return FilenameColumn(header=header, options=tuple(options))


def classify_headers(headers: Sequence[str]) -> HeaderLayout:
    headers = list(headers)
    seen = set()
    duplicates: List[str] = []
    for h in headers:
        if h in seen and h not in duplicates:
            duplicates.append(h)
        seen.add(h)
    for h in duplicates:
        log.warning("Duplicate header %r: keeping the first column", h)

    fn = filename_column(find_filename_header(headers))

    metadata: List[MetadataColumn] = []
    ignored: List[str] = []
    taken = set()
    for h in headers:
        if h in taken:
            continue
        taken.add(h)
        if is_metadata_header(h):
            metadata.append(parse_metadata_header(h))
        elif h != fn.header:
            ignored.append(h)

    return HeaderLayout(
        headers=headers,
        filename=fn,
        metadata=metadata,
        ignored=ignored,
        duplicates=duplicates,
    )


# ============================================================================
# Rows
# ============================================================================

def row_mapping(headers: Sequence[str], cells: Sequence[str]) -> Dict[str, str]:
    """
    Pair header and cell by position, in header order.

    Short rows are padded with "", extra cells are dropped, and for a
    repeated header the first column wins.
    """
    cells = list(cells)[: len(headers)]
    cells += [""] * (len(headers) - len(cells))
    row: Dict[str, str] = {}
    for h, cell in zip(headers, cells):
        row.setdefault(h, cell if cell is not None else "")
    return row


def split_values(cell: str) -> List[str]:
    return cell.split(VALUE_DELIMITER)


def build_metadata_entries(row: Mapping[str, str]) -> List[MetadataEntry]:
    """Turn the dc.* columns of one row into non-blank metadata entries."""
    entries: List[MetadataEntry] = []
    for header, value in row.items():
        if not is_metadata_header(header):
            continue
        col = parse_metadata_header(header)
        entry = MetadataEntry(
            element=col.element,
            qualifier=col.qualifier,
            values=split_values(value or ""),
        )
        if not entry.blank():
            entries.append(entry)
    return entries
