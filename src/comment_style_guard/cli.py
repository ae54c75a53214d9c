"""CLI for comment-style-guard: run the language server or check files."""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .core import Diagnostic, compute_diagnostics

logger = logging.getLogger(__name__)


def _read(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def format_diagnostic(source: str, d: Diagnostic) -> str:
    start = d.range.start
    return f"{source}:{start.line + 1}:{start.character + 1}: [{int(d.code)}] {d.message}"


def cmd_check(args: argparse.Namespace) -> int:
    """Check files against the comment style rules."""
    results: dict[str, list[Diagnostic]] = {}
    failed = False
    for source in args.paths:
        try:
            text = _read(source)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: cannot read {source}: {e}", file=sys.stderr)
            failed = True
            continue
        results[source] = compute_diagnostics(text)
        logger.debug(f"{source}: {len(results[source])} diagnostics")

    if args.json:
        payload = {source: [d.to_payload() for d in diags] for source, diags in results.items()}
        print(json.dumps(payload, indent=2))
    else:
        for source, diags in results.items():
            for d in diags:
                print(format_diagnostic(source, d))
        if not args.quiet:
            total = sum(len(diags) for diags in results.values())
            print(f"{total} problem(s) in {len(results)} file(s)", file=sys.stderr)

    if failed:
        return 2
    return 1 if any(results.values()) else 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the language server."""
    from .server import start

    start(tcp=args.tcp, host=args.host, port=args.port)
    return 0


def configure_logging(level: str, log_file: Path | None = None) -> None:
    # stdout carries the LSP stream, never log there.
    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[handler],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="comment-style-guard", description="Comment style linter and language server"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: warning)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write logs to this file instead of stderr",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Run the language server")
    parser_serve.add_argument("--tcp", action="store_true", help="Listen on TCP instead of stdio")
    parser_serve.add_argument("--host", default="127.0.0.1", help="TCP host (default: 127.0.0.1)")
    parser_serve.add_argument("--port", type=int, default=2087, help="TCP port (default: 2087)")

    # check command
    parser_check = subparsers.add_parser("check", help="Check files and print diagnostics")
    parser_check.add_argument("paths", nargs="+", help="Files to check ('-' for stdin)")
    parser_check.add_argument("--json", action="store_true", help="Machine-readable output")
    parser_check.add_argument("-q", "--quiet", action="store_true", help="Omit the summary line")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    commands = {
        "serve": cmd_serve,
        "check": cmd_check,
    }
    sys.exit(commands[args.cmd](args))
