from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import List, Optional

from saftools.csvpipe.types import PackageResult

log = logging.getLogger("saftools.saf")


def iter_tree_files(root: Path) -> List[Path]:
    """Regular files under `root`, sorted by their relative POSIX path."""
    root = Path(root)
    files = [p for p in root.rglob("*") if p.is_file()]
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def package_tree(root: Path, archive_path: Optional[Path] = None) -> PackageResult:
    """
    Store every regular file under `root` in a zip archive (no compression).

    Entry names are paths relative to `root`. Unlike item conversion,
    a file that cannot be read is skipped and the archive is still written.
    """
    root = Path(root).expanduser().resolve()
    if not root.is_dir():
        raise NotADirectoryError(root)
    if archive_path is None:
        archive_path = root.parent / f"{root.name}.zip"
    archive_path = Path(archive_path).expanduser().resolve()
    archive_path.parent.mkdir(parents=True, exist_ok=True)

    result = PackageResult(archive=archive_path)
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_STORED) as zf:
        for path in iter_tree_files(root):
            if path == archive_path:
                continue
            name = path.relative_to(root).as_posix()
            try:
                data = path.read_bytes()
            except OSError as e:
                log.debug("skip %s: %s", name, e)
                result.skipped.append(name)
                continue
            zf.writestr(name, data, compress_type=zipfile.ZIP_STORED)
            result.entries.append(name)

    log.info("Wrote %s (%d entr%s, %d skipped)", archive_path,
             len(result.entries), "y" if len(result.entries) == 1 else "ies", len(result.skipped))
    return result
