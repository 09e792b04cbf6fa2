from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from saftools.csvpipe.types import MetadataEntry

DUBLIN_CORE_TEMPLATE = "dublin_core.xml.j2"


def _package_templates() -> Path:
    return Path(__file__).resolve().parents[1] / "templates"


def get_template_env(template_path: Optional[Path] = None) -> Environment:
    """
    Jinja environment for the Dublin Core document.

    An explicit template file overrides the one shipped with the package.
    Values are XML-escaped.
    """
    if template_path is not None:
        template_path = Path(template_path)
        if not template_path.is_file():
            raise FileNotFoundError(template_path)
        search_dir = template_path.parent
    else:
        search_dir = _package_templates()

    return Environment(
        loader=FileSystemLoader(str(search_dir)),
        undefined=StrictUndefined,
        autoescape=True,
    )


def make_renderer(template_path: Optional[Path] = None):
    """Return render(entries) -> str bound to one template."""
    env = get_template_env(template_path)
    name = Path(template_path).name if template_path is not None else DUBLIN_CORE_TEMPLATE
    tpl = env.get_template(name)

    def render(entries: Sequence[MetadataEntry]) -> str:
        # blank entries never reach the template
        ctx = [e.to_render_context() for e in entries if not e.blank()]
        return tpl.render(entries=ctx)

    return render


@lru_cache(maxsize=None)
def _default_renderer():
    return make_renderer()


def render_dublin_core(entries: Sequence[MetadataEntry]) -> str:
    return _default_renderer()(entries)
