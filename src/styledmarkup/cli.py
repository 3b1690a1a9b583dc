"""Command-line interface for styledmarkup.

Usage::

    styledmarkup input.xml                        # writes input.html
    styledmarkup input.xml -o runs.json -f json   # explicit output and format
    styledmarkup input.xml --preset list          # use the list preset
    styledmarkup notes.md --markdown -p markdown  # Markdown input
    styledmarkup input.xml --rules rules.json     # custom JSON rule set
    styledmarkup --list-presets                   # list available presets
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from styledmarkup import __version__
from styledmarkup.converter import Converter
from styledmarkup.errors import StyledMarkupError
from styledmarkup.log import configure_logging
from styledmarkup.renderer import FORMATS, RENDERERS
from styledmarkup.resources import DirectoryImageLoader
from styledmarkup.style_manager import StyleManager


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="styledmarkup",
        description="Apply cascading style rules to XML-like markup or Markdown.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the markup file to style.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to <input> with the format's suffix.",
    )
    parser.add_argument(
        "-p", "--preset",
        default="default",
        choices=StyleManager.PRESETS,
        help="Rule-set preset (default: %(default)s).",
    )
    parser.add_argument(
        "-r", "--rules",
        help="JSON rule-set file; takes precedence over --preset.",
    )
    parser.add_argument(
        "-f", "--format",
        default="html",
        choices=FORMATS,
        help="Output format (default: %(default)s).",
    )
    parser.add_argument(
        "-m", "--markdown",
        action="store_true",
        help="Treat the input as Markdown.",
    )
    parser.add_argument(
        "-i", "--images",
        help="Directory holding images referenced by image insertions.",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List available rule-set presets and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information and debug logs.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.list_presets:
        print("Available presets:")
        for preset, description in StyleManager.describe_presets().items():
            print(f"  - {preset}: {description}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_suffix(RENDERERS[args.format].suffix)

    if args.verbose:
        print(f"Input:  {input_path}")
        print(f"Output: {output_path}")
        print(f"Rules:  {args.rules or args.preset}")

    try:
        style_manager = StyleManager.from_file(args.rules) if args.rules else StyleManager(args.preset)
        image_loader = DirectoryImageLoader(args.images) if args.images else None
        converter = Converter(
            style_manager=style_manager,
            markdown=args.markdown,
            image_loader=image_loader,
        )
        converter.convert_file(input_path, output_path, fmt=args.format, encoding=args.encoding)
    except (StyledMarkupError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Done. {output_path.stat().st_size} bytes written.")
    else:
        print(f"Styled: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
