from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .env import read_env

TEMPLATES_DIR_ENV = "QUIRE_TEMPLATE_DIR"
EPUB_TEMPLATES_DIR = Path(__file__).resolve().parent / "epub_templates"


def template_search_path() -> tuple[str, ...]:
    override = read_env(TEMPLATES_DIR_ENV)
    if override:
        return (override, str(EPUB_TEMPLATES_DIR))
    return (str(EPUB_TEMPLATES_DIR),)


@lru_cache(maxsize=4)
def _epub_template_env(search_path: tuple[str, ...]) -> Environment:
    return Environment(
        loader=FileSystemLoader(list(search_path)),
        autoescape=select_autoescape(
            enabled_extensions=("opf.j2", "xml.j2", "xhtml.j2"),
            default_for_string=False,
        ),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_epub_template(template_name: str, **context: object) -> str:
    return _epub_template_env(template_search_path()).get_template(template_name).render(**context)
