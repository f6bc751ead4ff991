"""DocumentRenderer protocol: the interface every output format implements.

Example:
    from podita.renderers.protocol import DocumentRenderer

    def render_chapter(renderer: DocumentRenderer, doc: Document) -> str:
        return renderer.render(doc)

"""

from typing import Protocol

from podita.nodes import Document


class DocumentRenderer(Protocol):
    """Protocol for renderers.

    Implementations accept a Document and return the rendered string. They
    raise UnsupportedBlockError for node types they cannot render.

    """

    name: str

    def render(self, node: Document) -> str:
        """Render a Document to a string.

        Args:
            node: The document to render.

        Returns:
            Rendered string output.

        """
        ...
