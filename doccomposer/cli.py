"""Command-line helpers for checking documents outside the console.

Usage:
    python -m doccomposer.cli render letter.txt --format html
    python -m doccomposer.cli render letter.txt --format plain
    python -m doccomposer.cli table members.json first_name last_name

``table`` reads a JSON list of member rows (objects with an ``id``) and
prints the ``[[TABLO:...]]`` directive for the given fields, using the
configured field catalog for the headers.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from doccomposer.config import load_composer_config
from doccomposer.entity import EntityRecord
from doccomposer.errors import ComposerError
from doccomposer.logging import setup_logging
from doccomposer.markup.render import render_html, strip_formatting, to_plain_text
from doccomposer.markup.serializer import serialize

RENDER_FORMATS = ("html", "plain", "strip")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="doccomposer", description="Render and build composer markup.")
    parser.add_argument("--config", type=Path, default=None, help="Path to doccomposer.toml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render document content with inline markup")
    render_parser.add_argument("path", type=Path, help="Text file, or - for stdin")
    render_parser.add_argument("--format", choices=RENDER_FORMATS, default="html")

    table_parser = subparsers.add_parser("table", help="Build a table directive from member rows")
    table_parser.add_argument("path", type=Path, help="JSON file with a list of rows")
    table_parser.add_argument("fields", nargs="+", help="Field keys, in column order")
    return parser


def _read(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging("doccomposer", logging.DEBUG if args.verbose else logging.WARNING)
    config = load_composer_config(args.config)

    if args.command == "render":
        content = _read(args.path)
        if args.format == "html":
            print(render_html(content, config))
        elif args.format == "plain":
            print(to_plain_text(content))
        else:
            print(strip_formatting(content))
        return 0

    try:
        rows = json.loads(_read(args.path))
        records = [EntityRecord.from_row(row) for row in rows]
        print(serialize(records, args.fields, config.fields))
    except (ComposerError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Cannot build table: {e}", pprint=False)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
