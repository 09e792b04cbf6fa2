from pathlib import Path

import pytest

from saftools.config import ConvertSettings
from saftools.csvpipe.types import MalformedSheetError
from saftools.saf.materialize import convert, item_folder_name, materialize_item
from saftools.saf.render import render_dublin_core


def _write_sheet(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "sheet.csv"
    p.write_bytes(text.encode("cp1252"))
    return p


def _write_payloads(tmp_path: Path, *names: str) -> None:
    for i, name in enumerate(names):
        # arbitrary bytes, including CR/LF and non-UTF-8
        (tmp_path / name).write_bytes(bytes(range(256)) + name.encode() + b"\r\n\x00" * i)


@pytest.mark.parametrize("index, name", [(0, "item_00000"), (3, "item_00003"), (123, "item_00123"), (99999, "item_99999")])
def test_item_folder_name(index, name):
    assert item_folder_name(index) == name


def test_materialize_item_writes_contents_files_and_metadata(tmp_path: Path):
    _write_payloads(tmp_path, "a.pdf", "b.png")
    outdir = tmp_path / "SimpleArchiveFormat"
    row = {
        "dc.title": "A title",
        "dc.subject": "",
        "filename__bundle__ORIGINAL": "a.pdf||b.png__THUMBNAIL",
    }

    item = materialize_item(2, row, base_dir=tmp_path, outdir=outdir, render_func=render_dublin_core)

    folder = outdir / "item_00002"
    assert item.folder == folder
    assert (folder / "contents").read_bytes() == (
        b"a.pdf\tbundle\tORIGINAL\r\nb.png\tTHUMBNAIL\tbundle\tORIGINAL\r\n"
    )
    for name in ("a.pdf", "b.png"):
        assert (folder / name).read_bytes() == (tmp_path / name).read_bytes()

    xml = (folder / "dublin_core.xml").read_text(encoding="utf-8")
    assert '<dcvalue element="title" qualifier="none">A title</dcvalue>' in xml
    assert 'element="subject"' not in xml


def test_renderer_receives_only_non_blank_entries(tmp_path: Path):
    _write_payloads(tmp_path, "a.pdf")
    seen = {}

    def fake_render(entries):
        seen["entries"] = list(entries)
        return "<dublin_core/>"

    row = {"dc.title": "T", "dc.subject": "||", "filename": "a.pdf"}
    materialize_item(0, row, base_dir=tmp_path, outdir=tmp_path / "out", render_func=fake_render)

    assert [e.element for e in seen["entries"]] == ["title"]
    assert (tmp_path / "out" / "item_00000" / "dublin_core.xml").read_text() == "<dublin_core/>"


def test_missing_source_file_is_fatal(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        materialize_item(
            0,
            {"filename": "missing.pdf"},
            base_dir=tmp_path,
            outdir=tmp_path / "out",
            render_func=render_dublin_core,
        )


def test_row_without_filename_column_writes_nothing(tmp_path: Path):
    outdir = tmp_path / "out"
    with pytest.raises(MalformedSheetError):
        materialize_item(0, {"dc.title": "T"}, base_dir=tmp_path, outdir=outdir, render_func=render_dublin_core)
    assert not (outdir / "item_00000").exists()


def test_convert_whole_sheet(tmp_path: Path):
    _write_payloads(tmp_path, "a.pdf", "b.pdf", "c.pdf")
    csv_path = _write_sheet(
        tmp_path,
        "dc.title,dc.contributor.author,filename\r\n"
        "First,\"Doe, J.||Roe, R.\",a.pdf\r\n"
        "Second,,b.pdf||c.pdf\r\n",
    )

    result = convert(ConvertSettings(csv_path=csv_path))

    root = tmp_path / "SimpleArchiveFormat"
    assert result.root == root
    assert [i.folder.name for i in result.items] == ["item_00000", "item_00001"]
    assert result.archive is None
    assert not (tmp_path / "SimpleArchiveFormat.zip").exists()

    assert (root / "item_00001" / "contents").read_bytes() == b"b.pdf\r\nc.pdf\r\n"
    xml0 = (root / "item_00000" / "dublin_core.xml").read_text(encoding="utf-8")
    assert xml0.index("First") < xml0.index("Doe, J.") < xml0.index("Roe, R.")
    xml1 = (root / "item_00001" / "dublin_core.xml").read_text(encoding="utf-8")
    assert 'element="contributor"' not in xml1


def test_convert_rejects_sheet_without_filename_column_before_output(tmp_path: Path):
    csv_path = _write_sheet(tmp_path, "dc.title,files\r\nT,a.pdf\r\n")
    with pytest.raises(MalformedSheetError):
        convert(ConvertSettings(csv_path=csv_path))
    assert not (tmp_path / "SimpleArchiveFormat").exists()


def test_convert_is_rerunnable(tmp_path: Path):
    _write_payloads(tmp_path, "a.pdf")
    csv_path = _write_sheet(tmp_path, "dc.title,filename\r\nT,a.pdf\r\n")

    convert(ConvertSettings(csv_path=csv_path))
    convert(ConvertSettings(csv_path=csv_path))

    assert (tmp_path / "SimpleArchiveFormat" / "item_00000" / "contents").read_bytes() == b"a.pdf\r\n"


def test_convert_with_zip(tmp_path: Path):
    _write_payloads(tmp_path, "a.pdf")
    csv_path = _write_sheet(tmp_path, "dc.title,filename\r\nT,a.pdf\r\n")

    result = convert(ConvertSettings(csv_path=csv_path, zip=True, output_name="batch1"))

    assert result.archive == tmp_path / "batch1.zip"
    assert result.package.entries == [
        "item_00000/a.pdf",
        "item_00000/contents",
        "item_00000/dublin_core.xml",
    ]


def test_blank_file_name_is_fatal_and_writes_nothing(tmp_path: Path):
    _write_payloads(tmp_path, "a.pdf", "b.pdf")
    outdir = tmp_path / "out"
    with pytest.raises(MalformedSheetError, match="Row 4"):
        materialize_item(
            4,
            {"filename": "a.pdf||||b.pdf"},
            base_dir=tmp_path,
            outdir=outdir,
            render_func=render_dublin_core,
        )
    assert not (outdir / "item_00004").exists()


def test_custom_template_used_by_convert(tmp_path: Path):
    _write_payloads(tmp_path, "a.pdf")
    csv_path = _write_sheet(tmp_path, "dc.title,filename\r\nT,a.pdf\r\n")
    tpl = tmp_path / "dc.j2"
    tpl.write_text("{% for e in entries %}{{ e['element'] }}{% endfor %}", encoding="utf-8")

    convert(ConvertSettings(csv_path=csv_path, template=tpl))

    assert (tmp_path / "SimpleArchiveFormat" / "item_00000" / "dublin_core.xml").read_text() == "title"
