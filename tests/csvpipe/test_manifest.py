import pytest

from saftools.csvpipe.manifest import filename_tuple, manifest_text, resolve_files
from saftools.csvpipe.types import MalformedSheetError


def test_per_file_options_precede_row_options():
    row = {"dc.title": "T", "filename__bundle__ORIGINAL": "a.pdf||b.png__THUMBNAIL"}
    files = resolve_files(row)

    assert [f.name for f in files] == ["a.pdf", "b.png"]
    assert files[0].manifest_line() == "a.pdf\tbundle\tORIGINAL"
    assert files[1].manifest_line() == "b.png\tTHUMBNAIL\tbundle\tORIGINAL"
    assert manifest_text(files) == "a.pdf\tbundle\tORIGINAL\r\nb.png\tTHUMBNAIL\tbundle\tORIGINAL\r\n"


def test_plain_filename_column():
    files = resolve_files({"file name": "scan.tif"})
    assert manifest_text(files) == "scan.tif\r\n"


def test_filename_tuple_uses_priority():
    row = {"bitstream": "x.pdf", "filename": "y.pdf"}
    assert filename_tuple(row) == ("filename", "y.pdf")


def test_no_filename_column():
    with pytest.raises(MalformedSheetError):
        resolve_files({"dc.title": "T"})


@pytest.mark.parametrize("cell", ["", "a.pdf||||b.pdf", "a.pdf||__THUMBNAIL"])
def test_blank_file_name_is_malformed(cell):
    with pytest.raises(MalformedSheetError, match="Blank file name"):
        resolve_files({"filename": cell})
