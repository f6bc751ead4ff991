"""Command-line interface for Podita.

Usage:
  podita render FILE... [--format html|plain] [--heading-offset N]
                        [--shared-anchors] [--strict] [-o DIR]
  podita check FILE...
  podita dump FILE [--resolve]

Diagnostics go to stderr as ``file:line:col message``. The exit status is 1
if any document failed with a fatal error, else 0.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from podita import __version__
from podita.config import OUTPUT_FORMATS, ParseConfig, RenderConfig
from podita.errors import PoditaError
from podita.pipeline import RenderResult, parse, process_many
from podita.renderers.html import PAGE_SUFFIX
from podita.resolver import resolve
from podita.serialization import to_json
from podita.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

_SUFFIXES = {"html": PAGE_SUFFIX, "plain": ".pod"}


def _read_sources(paths: list[Path]) -> tuple[list[str], list[str], int]:
    """Read input files; unreadable ones are reported and skipped."""
    sources: list[str] = []
    names: list[str] = []
    failures = 0
    for path in paths:
        try:
            sources.append(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            failures += 1
            continue
        names.append(str(path))
    return sources, names, failures


def _report(result: RenderResult) -> None:
    for diagnostic in result.diagnostics:
        print(f"warning: {diagnostic}", file=sys.stderr)
    if result.error is not None:
        print(f"error: {result.error}", file=sys.stderr)


def _cmd_render(args: argparse.Namespace) -> int:
    render_config = RenderConfig(format=args.format, heading_offset=args.heading_offset)
    sources, names, failures = _read_sources(args.files)
    results = process_many(
        sources,
        source_files=names,
        config=ParseConfig(strict_directives=args.strict),
        render_config=render_config,
        shared_anchors=args.shared_anchors,
        max_workers=args.jobs,
    )

    if args.output_dir is not None:
        args.output_dir.mkdir(parents=True, exist_ok=True)

    for result in results:
        _report(result)
        if result.output is None:
            failures += 1
            continue
        if args.output_dir is None:
            sys.stdout.write(result.output)
            continue
        assert result.source_file is not None
        target = args.output_dir / Path(result.source_file).with_suffix(
            _SUFFIXES[args.format]
        ).name
        target.write_text(result.output, encoding="utf-8")
        logger.info("wrote %s", target)
    return 1 if failures else 0


def _cmd_check(args: argparse.Namespace) -> int:
    sources, names, failures = _read_sources(args.files)
    config = ParseConfig(strict_directives=args.strict)
    for source, name in zip(sources, names, strict=True):
        try:
            result = resolve(parse(source, source_file=name, config=config))
        except PoditaError as exc:
            print(f"error: {exc}", file=sys.stderr)
            failures += 1
            continue
        for diagnostic in result.diagnostics:
            print(f"warning: {diagnostic}", file=sys.stderr)
        status = "ok" if not result.diagnostics else f"{len(result.diagnostics)} warning(s)"
        print(f"{name}: {status}")
    return 1 if failures else 0


def _cmd_dump(args: argparse.Namespace) -> int:
    sources, names, failures = _read_sources([args.file])
    if failures:
        return 1
    try:
        doc = parse(sources[0], source_file=names[0])
        if args.resolve:
            doc = resolve(doc).document
    except PoditaError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(to_json(doc, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podita",
        description="Parse and render PseudoPod book chapters.",
    )
    parser.add_argument("--version", action="version", version=f"podita {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More logging (repeat for debug)"
    )
    subparsers = parser.add_subparsers(title="commands", metavar="<command>", dest="command")
    subparsers.required = True

    render = subparsers.add_parser("render", help="Render chapters to HTML or plain markup")
    render.add_argument("files", nargs="+", type=Path, metavar="FILE")
    render.add_argument("--format", choices=OUTPUT_FORMATS, default="html")
    render.add_argument("--heading-offset", type=int, default=0, metavar="N")
    render.add_argument(
        "--shared-anchors",
        action="store_true",
        help="Resolve references against the anchors of every input file",
    )
    render.add_argument(
        "--strict", action="store_true", help="Treat unknown directives as errors"
    )
    render.add_argument(
        "-o", "--output-dir", type=Path, metavar="DIR", help="Write one file per chapter"
    )
    render.add_argument("-j", "--jobs", type=int, default=None, help="Worker threads")
    render.set_defaults(func=_cmd_render)

    check = subparsers.add_parser("check", help="Parse and resolve, reporting diagnostics")
    check.add_argument("files", nargs="+", type=Path, metavar="FILE")
    check.add_argument("--strict", action="store_true")
    check.set_defaults(func=_cmd_check)

    dump = subparsers.add_parser("dump", help="Print the parsed tree as JSON")
    dump.add_argument("file", type=Path, metavar="FILE")
    dump.add_argument("--resolve", action="store_true", help="Dump the resolved tree")
    dump.set_defaults(func=_cmd_dump)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
