"""Podita renderers.

Renderers convert a Document into an output format.

Available Renderers:
- HtmlRenderer: Renders a resolved Document to HTML using StringBuilder
- PlainRenderer: Renders a Document back to normalized markup

Thread Safety:
All renderers use StringBuilder local to each render() call.
Safe for concurrent use from multiple threads.

"""

from podita.config import RenderConfig
from podita.renderers.html import HtmlRenderer
from podita.renderers.plain import PlainRenderer
from podita.renderers.protocol import DocumentRenderer

RENDERERS: dict[str, type[HtmlRenderer] | type[PlainRenderer]] = {
    "html": HtmlRenderer,
    "plain": PlainRenderer,
}


def get_renderer(config: RenderConfig) -> DocumentRenderer:
    """Build the renderer for ``config.format``."""
    return RENDERERS[config.format](config)


__all__ = ["DocumentRenderer", "HtmlRenderer", "PlainRenderer", "RENDERERS", "get_renderer"]
