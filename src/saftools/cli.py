from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from jinja2 import TemplateError

from saftools.config import DEFAULT_OUTPUT_NAME, build_settings
from saftools.csvpipe.loader import DEFAULT_ENCODING, read_csv_rows
from saftools.csvpipe.mapping import classify_headers
from saftools.csvpipe.types import SafError
from saftools.log import setup_logging
from saftools.saf.materialize import convert
from saftools.saf.package import package_tree

app = typer.Typer(help="Spreadsheet → DSpace Simple Archive Format (SAF) builder")


def _fail(msg: str) -> None:
    typer.secho(f"Error: {msg}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("convert")
def convert_cmd(
    csv_path: Optional[Path] = typer.Argument(None, help="CSV spreadsheet (files are resolved next to it)"),
    encoding: Optional[str] = typer.Option(None, "--encoding", "-e", help=f"Text encoding of the CSV [default: {DEFAULT_ENCODING}]"),
    zip_output: Optional[bool] = typer.Option(None, "--zip/--no-zip", "-z", help="Also write <output-name>.zip"),
    output_name: Optional[str] = typer.Option(None, "--output-name", "-o", help=f"Output directory name [default: {DEFAULT_OUTPUT_NAME}]"),
    template: Optional[Path] = typer.Option(None, "--template", help="Override the dublin_core.xml Jinja2 template"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML file with any of the options above"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Build one SAF item folder per spreadsheet row."""
    setup_logging(verbose)
    try:
        settings = build_settings(
            config,
            csv_path=csv_path,
            encoding=encoding,
            zip=zip_output,
            output_name=output_name,
            template=template,
        )
        result = convert(settings)
    except (SafError, OSError, TemplateError) as e:
        _fail(str(e))

    typer.secho(f"Wrote {len(result.items)} item(s) to {result.root}", fg=typer.colors.GREEN)
    if result.package is not None:
        msg = f"Wrote {result.package.archive} ({len(result.package.entries)} file(s))"
        if result.package.skipped:
            msg += f", skipped {len(result.package.skipped)} unreadable file(s)"
        typer.secho(msg, fg=typer.colors.GREEN)


@app.command("package")
def package_cmd(
    root: Path = typer.Argument(..., help="Existing SAF output directory"),
    out: Optional[Path] = typer.Option(None, "--out", help="Archive path [default: <root>.zip beside root]"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Zip an existing SAF tree (stored, paths relative to ROOT)."""
    setup_logging(verbose)
    try:
        res = package_tree(root, out)
    except OSError as e:
        _fail(str(e))
    typer.secho(f"Wrote {res.archive} ({len(res.entries)} file(s))", fg=typer.colors.GREEN)
    for name in res.skipped:
        typer.secho(f"  skipped {name}", fg=typer.colors.YELLOW)


@app.command("inspect")
def inspect_cmd(
    csv_path: Path = typer.Argument(..., help="CSV spreadsheet"),
    encoding: str = typer.Option(DEFAULT_ENCODING, "--encoding", "-e"),
):
    """Show how the header row is classified."""
    try:
        headers, rows = read_csv_rows(csv_path, encoding)
        layout = classify_headers(headers)
    except (SafError, OSError, LookupError) as e:
        _fail(str(e))
    summary = layout.summary()
    summary["rows"] = len(rows)
    typer.echo(json.dumps(summary, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
