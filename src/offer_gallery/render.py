"""Server-side HTML rendering of the gallery page."""

from __future__ import annotations

from functools import lru_cache

from jinja2 import Environment, PackageLoader, select_autoescape

from .viewmodels import PageViewModel


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    return Environment(
        loader=PackageLoader("offer_gallery", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_page(page: PageViewModel, root_margin: float = 200.0) -> str:
    """Render the full gallery page.

    Card names and captions go through template autoescaping; the
    pre-escaped ``escaped_*`` fields are not used here so nothing is escaped
    twice.
    """
    template = get_environment().get_template("gallery.html")
    return template.render(page=page, root_margin=root_margin)


__all__ = ["get_environment", "render_page"]
