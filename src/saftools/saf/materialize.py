from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from saftools.config import ConvertSettings
from saftools.csvpipe.loader import iter_row_mappings, read_csv_rows
from saftools.csvpipe.manifest import manifest_text, resolve_files
from saftools.csvpipe.mapping import build_metadata_entries, classify_headers
from saftools.csvpipe.types import ConversionResult, ItemResult, MalformedSheetError, MetadataEntry
from saftools.saf.package import package_tree
from saftools.saf.render import make_renderer, render_dublin_core

log = logging.getLogger("saftools.saf")

CONTENTS_FILENAME = "contents"
DUBLIN_CORE_FILENAME = "dublin_core.xml"

RenderFunc = Callable[[Sequence[MetadataEntry]], str]


def item_folder_name(index: int) -> str:
    return f"item_{index:05d}"


def materialize_item(
    index: int,
    row: Mapping[str, str],
    *,
    base_dir: Path,
    outdir: Path,
    render_func: RenderFunc,
) -> ItemResult:
    """
    Write one SAF item for one spreadsheet row:

        <outdir>/item_NNNNN/contents
        <outdir>/item_NNNNN/<copied files>
        <outdir>/item_NNNNN/dublin_core.xml

    Any OSError propagates; there is no cleanup of a half-written item.
    """
    # resolved first so a malformed row fails before anything is written
    try:
        files = resolve_files(row)
    except MalformedSheetError as e:
        raise MalformedSheetError(f"Row {index}: {e}") from e
    entries = build_metadata_entries(row)

    folder = outdir / item_folder_name(index)
    folder.mkdir(parents=True, exist_ok=True)

    # newline="" keeps the CRLF terminators byte-exact
    with (folder / CONTENTS_FILENAME).open("w", encoding="utf-8", newline="") as contents:
        for f in files:
            src = base_dir / f.name
            log.debug("copy %s -> %s", src, folder / f.name)
            shutil.copyfile(src, folder / f.name)
            contents.write(manifest_text([f]))

    text = render_func(entries)
    with (folder / DUBLIN_CORE_FILENAME).open("w", encoding="utf-8", newline="") as fh:
        fh.write(text)

    return ItemResult(index=index, folder=folder, files=files, metadata=entries)


def convert(
    settings: ConvertSettings,
    *,
    render_func: Optional[RenderFunc] = None,
) -> ConversionResult:
    """Convert a whole spreadsheet, row by row, then optionally zip the tree."""
    csv_path = Path(settings.csv_path).expanduser().resolve()
    base_dir = csv_path.parent
    outdir = base_dir / settings.output_name

    headers, rows = read_csv_rows(csv_path, settings.encoding)
    layout = classify_headers(headers)
    log.info(
        "%s: %d row(s), filename column %r, %d metadata column(s)",
        csv_path.name, len(rows), layout.filename.header, len(layout.metadata),
    )

    if render_func is None:
        render_func = make_renderer(settings.template) if settings.template else render_dublin_core

    outdir.mkdir(parents=True, exist_ok=True)
    items: List[ItemResult] = []
    for i, row in iter_row_mappings(headers, rows):
        item = materialize_item(i, row, base_dir=base_dir, outdir=outdir, render_func=render_func)
        log.info("%s: %d file(s), %d metadata field(s)", item.folder.name, len(item.files), len(item.metadata))
        items.append(item)

    result = ConversionResult(root=outdir, items=items)
    if settings.zip:
        result.package = package_tree(outdir, base_dir / f"{settings.output_name}.zip")
    return result
