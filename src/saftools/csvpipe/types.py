from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

VALUE_DELIMITER = "||"   # multiple values / multiple files in one cell
OPTION_DELIMITER = "__"  # base token vs. option tokens
NO_QUALIFIER = "none"


class SafError(Exception):
    """Base error for spreadsheet → SAF conversion."""


class MalformedSheetError(SafError, ValueError):
    """The spreadsheet cannot be interpreted (bad or missing headers)."""


@dataclass
class MetadataEntry:
    element: str
    qualifier: str = NO_QUALIFIER
    values: List[str] = field(default_factory=list)

    def blank(self) -> bool:
        return not self.real_values()

    def real_values(self) -> List[str]:
        return [v for v in self.values if v]

    def to_render_context(self) -> Dict[str, object]:
        return {
            "element": self.element,
            "qualifier": self.qualifier,
            "values": self.real_values(),
        }


@dataclass(frozen=True)
class FileEntry:
    """One bundled file of an item and its manifest fields."""

    name: str
    options: Tuple[str, ...] = ()

    @property
    def fields(self) -> Tuple[str, ...]:
        return (self.name,) + self.options

    def manifest_line(self) -> str:
        return "\t".join(self.fields)


@dataclass(frozen=True)
class FilenameColumn:
    """
    The authoritative filename column of a sheet.

    `options` are the row-level option tokens carried on the header,
    e.g. header "filename__bundle__ORIGINAL" → ("bundle", "ORIGINAL").
    """

    header: str
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetadataColumn:
    header: str
    element: str
    qualifier: str = NO_QUALIFIER


@dataclass
class HeaderLayout:
    """Result of classifying a header row once."""

    headers: List[str]
    filename: FilenameColumn
    metadata: List[MetadataColumn] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, object]:
        return {
            "filename": {
                "header": self.filename.header,
                "options": list(self.filename.options),
            },
            "metadata": [
                {"header": m.header, "element": m.element, "qualifier": m.qualifier}
                for m in self.metadata
            ],
            "ignored": list(self.ignored),
            "duplicates": list(self.duplicates),
        }


@dataclass
class ItemResult:
    index: int
    folder: Path
    files: List[FileEntry] = field(default_factory=list)
    metadata: List[MetadataEntry] = field(default_factory=list)


@dataclass
class PackageResult:
    archive: Path
    entries: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


@dataclass
class ConversionResult:
    root: Path
    items: List[ItemResult] = field(default_factory=list)
    package: Optional[PackageResult] = None

    @property
    def archive(self):
        return self.package.archive if self.package is not None else None
