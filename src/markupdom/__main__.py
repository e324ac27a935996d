#!/usr/bin/env python3
"""Command-line interface for markupdom."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import TYPE_CHECKING

from . import from_string
from .node import ElementNode

if TYPE_CHECKING:
    from .node import Node


def _get_version() -> str:
    try:
        return version("markupdom")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="markupdom",
        description="Parse an HTML or XML document and print the nodes matching a CSS selector.",
        epilog=(
            "Examples:\n"
            "  markupdom page.html --selector 'a[href^=\"/docs\"]' --attr href\n"
            "  markupdom feed.xml --xml --selector 'item > title' --format inner\n"
            "  curl -s https://example.com | markupdom - --selector 'ul > li' --first\n"
            "\n"
            "If you don't have the 'markupdom' command available, use:\n"
            "  python -m markupdom ...\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "path",
        nargs="?",
        help="Document to parse, or '-' to read from stdin",
    )
    parser.add_argument(
        "--selector",
        help="CSS selector for choosing elements (defaults to the whole document)",
    )
    parser.add_argument(
        "--xml",
        action="store_true",
        help="Parse in XML mode: case-sensitive names, no void or raw-content tags",
    )
    parser.add_argument(
        "--encoding",
        help="Text encoding of the input file (default: platform default)",
    )
    parser.add_argument(
        "--format",
        choices=["markup", "inner"],
        default="markup",
        help="Print each match as markup, or only its inner markup (default: markup)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Put each child node on its own indented line",
    )
    parser.add_argument(
        "--attr",
        metavar="NAME",
        help="Print the value of this attribute instead of markup (matches without it are skipped)",
    )
    parser.add_argument(
        "--first",
        action="store_true",
        help="Only output the first matching node",
    )
    parser.add_argument(
        "--errors",
        action="store_true",
        help="Report parse problems on stderr",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"markupdom {_get_version()}",
    )

    args = parser.parse_args(argv)

    if not args.path:
        parser.print_help(sys.stderr)
        raise SystemExit(1)

    return args


def _read_source(path: str, encoding: str | None) -> str:
    if path == "-":
        return sys.stdin.read()

    return Path(path).read_text(encoding=encoding)


def _render(node: Node, args: argparse.Namespace) -> str | None:
    if args.attr:
        return node.get_attr_value(args.attr) if isinstance(node, ElementNode) else None
    if args.format == "inner":
        return node.inner()
    return node.to_string(pretty=args.pretty)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

    source = _read_source(args.path, args.encoding)
    doc = from_string(source, xmlmode=args.xml, collect_errors=args.errors)

    for error in doc.errors:
        print(f"{args.path}:{error}", file=sys.stderr)

    nodes: list[Node]
    if args.selector:
        matches: list[ElementNode] = doc.search(args.selector)
        nodes = list(matches)
    else:
        nodes = [doc.document]

    outputs = [text for text in (_render(node, args) for node in nodes) if text is not None]
    if not outputs:
        raise SystemExit(1)

    if args.first:
        outputs = outputs[:1]

    sys.stdout.write("\n".join(outputs))
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
