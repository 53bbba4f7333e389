"""CLI for proofline - analyzer annotations for editable documents."""

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.text_document import from_text
from .config import load_config
from .core.flatten import flatten
from .core.translate import translate
from .errors import ProoflineError, TransportFailure
from .locate import format_location, locate_annotation
from .runtime import build_runtime


def _read_doc(path: Path) -> Any:
    return from_text(path.read_text(encoding="utf-8"))


def cmd_flatten(args: argparse.Namespace) -> int:
    """Print the flat text and anchors the analysis service would see."""
    flat_map = flatten(_read_doc(args.file))

    if args.json:
        print(json.dumps({
            "text": flat_map.text,
            "anchors": [[a.tree_position, a.flat_offset] for a in flat_map.anchors],
        }))
        return 0

    print(flat_map.text)
    if not args.quiet:
        print()
        for anchor in flat_map.anchors:
            print(f"position {anchor.tree_position} -> offset {anchor.flat_offset}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Analyze a file once and print its annotations."""
    rt = build_runtime(config_path=args.config, api_url=args.api_url, language=args.language)
    flat_map = flatten(_read_doc(args.file))

    try:
        matches = rt.client.check(flat_map.text)
    except TransportFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    base = rt.config.document.position_base
    located = [locate_annotation(a, flat_map, base) for a in translate(matches, flat_map, base)]

    if args.json:
        print(json.dumps(located, indent=2))
    else:
        for info in located:
            print(format_location(info))
        if not args.quiet:
            print(f"{len(located)} issue(s) found")

    return 1 if located and args.strict else 0


def cmd_watch(args: argparse.Namespace) -> int:
    """Watch a file and re-analyze it as it changes."""
    from .watch import watch_file

    rt = build_runtime(
        config_path=args.config,
        api_url=args.api_url,
        language=args.language,
        debounce_ms=args.debounce_ms,
    )
    return watch_file(args.file, rt, quiet=args.quiet, json_output=args.json)


def _configure_logging(args: argparse.Namespace) -> None:
    level = "DEBUG" if args.verbose else load_config(config_path=args.config).logging.level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proofline", description="Analyzer annotations for editable documents"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"proofline {__version__} (python {platform.python_version()}, {platform.platform()})",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: ./proofline.toml)",
    )
    parser.add_argument(
        "--api-url", default=None, help="LanguageTool API base URL (overrides config)"
    )
    parser.add_argument(
        "--language", default=None, help="Language code sent to the service (default: auto)"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_flatten = subparsers.add_parser("flatten", help="Show the flattened text of a file")
    parser_flatten.add_argument("file", type=Path)

    parser_check = subparsers.add_parser("check", help="Analyze a file once")
    parser_check.add_argument("file", type=Path)
    parser_check.add_argument(
        "--strict", action="store_true", help="Exit with status 1 if any issue is found"
    )

    parser_watch = subparsers.add_parser("watch", help="Watch a file and keep analyzing it")
    parser_watch.add_argument("file", type=Path)
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=None,
        help="Debounce window in milliseconds (default: from config, 1000)"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    handlers = {
        "flatten": cmd_flatten,
        "check": cmd_check,
        "watch": cmd_watch,
    }

    try:
        _configure_logging(args)
        exit_code = handlers[args.cmd](args)
    except (ProoflineError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
