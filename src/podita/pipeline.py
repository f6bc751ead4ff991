"""End-to-end pipeline: parse, resolve, render.

Single documents go through ``process``; batches go through
``process_many``, which renders independent documents on a thread pool.
A fatal error aborts only the document it was raised for: the batch
records it on that document's RenderResult and carries on.

Example:
    >>> from podita.pipeline import process
    >>> result = process("=head1 Hello\\n\\nSee L<nowhere>.\\n")
    >>> [type(d).__name__ for d in result.diagnostics]
    ['UnresolvedReferenceError']

Thread Safety:
    Parse configuration is captured in the calling thread and applied inside
    each worker, so workers see the caller's ParseConfig.

"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from podita.anchors import AnchorTable, AnchorTarget
from podita.config import ParseConfig, RenderConfig, get_parse_config, parse_config_context
from podita.errors import DuplicateAnchorError, PoditaError, RecoverableError
from podita.nodes import Document
from podita.parser import Parser
from podita.renderers import get_renderer
from podita.resolver import ResolveResult, resolve
from podita.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Outcome of processing one document.

    Attributes:
        output: Rendered text, or None if the document failed
        diagnostics: Recoverable issues, parse then resolution order
        document: Resolved Document, or None if parsing failed
        source_file: Name the document was processed under
        error: Fatal error that aborted this document, if any

    """

    output: str | None
    diagnostics: tuple[RecoverableError, ...] = ()
    document: Document | None = None
    source_file: str | None = None
    error: PoditaError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse(
    source: str,
    *,
    source_file: str | None = None,
    config: ParseConfig | None = None,
) -> Document:
    """Parse markup into a Document.

    Args:
        source: Markup source text
        source_file: Optional source file path for error messages
        config: Parse configuration for this call; defaults to the active
            context configuration

    Raises:
        LexError: Unterminated inline format code
        StructureError: Mismatched or unclosed directives, duplicate anchors

    Example:
        >>> doc = parse("=head1 Title\\n\\nHello world.\\n")
        >>> doc.children[0].children[0].text
        'Hello world.'
    """
    if config is None:
        return Parser(source, source_file=source_file).parse()
    with parse_config_context(config):
        return Parser(source, source_file=source_file).parse()


def render(doc: Document, config: RenderConfig | None = None) -> str:
    """Render a Document in the format named by ``config`` (HTML by default).

    Raises:
        RenderError: HTML requested for an unresolved document
        UnsupportedBlockError: Node type with no template
    """
    return get_renderer(config or RenderConfig()).render(doc)


def process(
    source: str,
    *,
    source_file: str | None = None,
    config: ParseConfig | None = None,
    render_config: RenderConfig | None = None,
    external_anchors: Mapping[str, AnchorTarget] | None = None,
) -> RenderResult:
    """Parse, resolve and render one document.

    Each diagnostic is logged at WARNING and returned on the result.
    Fatal errors propagate.
    """
    doc = parse(source, source_file=source_file, config=config)
    resolved = resolve(doc, external_anchors=external_anchors)
    return _render_resolved(resolved, render_config, source_file)


def _render_resolved(
    resolved: ResolveResult,
    render_config: RenderConfig | None,
    source_file: str | None,
) -> RenderResult:
    for diagnostic in resolved.diagnostics:
        logger.warning("%s", diagnostic)
    output = render(resolved.document, render_config)
    return RenderResult(
        output=output,
        diagnostics=resolved.diagnostics,
        document=resolved.document,
        source_file=source_file,
    )


def process_many(
    sources: Sequence[str],
    *,
    source_files: Sequence[str | None] | None = None,
    config: ParseConfig | None = None,
    render_config: RenderConfig | None = None,
    shared_anchors: bool = False,
    max_workers: int | None = None,
) -> list[RenderResult]:
    """Process several documents in parallel.

    Results come back in input order. A document that raises a PoditaError
    gets a RenderResult with ``error`` set and ``output=None``; the others
    are unaffected.

    Args:
        sources: Markup sources, one per document
        source_files: Names for error messages, parallel to ``sources``
        config: Parse configuration (defaults to the caller's context)
        render_config: Render configuration shared by all documents
        shared_anchors: Resolve cross references against the anchors of
            every document in the batch, not just the document's own
        max_workers: Thread pool size (ThreadPoolExecutor default if None)

    Example:
        >>> results = process_many(["=head1 A Z<a>\\n", "=head1 B\\n\\nL<a>\\n"],
        ...                        shared_anchors=True)
        >>> [len(r.diagnostics) for r in results]
        [0, 0]
    """
    names: Sequence[str | None] = source_files or [None] * len(sources)
    if len(names) != len(sources):
        msg = "source_files must have one entry per source"
        raise ValueError(msg)
    parse_cfg = config or get_parse_config()

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        parsed = list(executor.map(lambda s, n: _try_parse(s, n, parse_cfg), sources, names))

        external: AnchorTable | None = None
        if shared_anchors:
            external = _combine_anchors(parsed, names)

        return list(
            executor.map(
                lambda p, n: _try_finish(p, n, render_config, external), parsed, names
            )
        )


def _try_parse(source: str, name: str | None, config: ParseConfig) -> Document | PoditaError:
    try:
        return parse(source, source_file=name, config=config)
    except PoditaError as exc:
        logger.error("%s: %s", name or "<string>", exc)
        return exc


def _try_finish(
    parsed: Document | PoditaError,
    name: str | None,
    render_config: RenderConfig | None,
    external: AnchorTable | None,
) -> RenderResult:
    if isinstance(parsed, PoditaError):
        return RenderResult(output=None, source_file=name, error=parsed)
    try:
        return _render_resolved(resolve(parsed, external_anchors=external), render_config, name)
    except PoditaError as exc:
        logger.error("%s: %s", name or "<string>", exc)
        return RenderResult(
            output=None, diagnostics=parsed.diagnostics, source_file=name, error=exc
        )


def _combine_anchors(
    parsed: list[Document | PoditaError], names: Sequence[str | None]
) -> AnchorTable:
    """Merge the anchors of every parsed document.

    A name declared in two documents keeps its first declaration; the clash
    fails the later document.
    """
    combined = AnchorTable()
    for index, doc in enumerate(parsed):
        if isinstance(doc, PoditaError):
            continue
        clash = next((t for t in doc.anchors.values() if t.name in combined), None)
        if clash is not None:
            exc = DuplicateAnchorError.at(
                clash.location,
                f"anchor '{clash.name}' already declared at {combined[clash.name].location}",
                anchor=clash.name,
            )
            logger.error("%s: %s", names[index] or "<string>", exc)
            parsed[index] = exc
            continue
        for target in doc.anchors.values():
            combined.declare(target)
    return combined.freeze()
