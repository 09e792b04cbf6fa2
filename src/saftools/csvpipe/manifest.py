from __future__ import annotations

from typing import List, Mapping, Sequence, Tuple

from .mapping import filename_column, find_filename_header, split_values
from .types import OPTION_DELIMITER, FileEntry, MalformedSheetError

CRLF = "\r\n"


def filename_tuple(row: Mapping[str, str]) -> Tuple[str, str]:
    """Return (header, cell value) of the row's filename column."""
    header = find_filename_header(row.keys())
    return header, row[header]


def resolve_files(row: Mapping[str, str]) -> List[FileEntry]:
    """
    Expand the filename cell of one row into manifest entries.

    Header "filename__bundle__ORIGINAL" with cell "a.pdf||b.png__THUMBNAIL"
    gives:

        a.pdf   bundle  ORIGINAL
        b.png   THUMBNAIL   bundle  ORIGINAL

    Per-file options come before the row-level options from the header.
    """
    header, value = filename_tuple(row)
    row_opts = filename_column(header).options

    files: List[FileEntry] = []
    for raw in split_values(value or ""):
        tokens = raw.split(OPTION_DELIMITER)
        name, file_opts = tokens[0], tokens[1:]
        if not name:
            raise MalformedSheetError(
                f"Blank file name in entry {raw!r} of column {header!r} (cell {value!r})"
            )
        files.append(FileEntry(name=name, options=tuple(file_opts) + tuple(row_opts)))
    return files


def manifest_text(files: Sequence[FileEntry]) -> str:
    return "".join(f.manifest_line() + CRLF for f in files)
