"""CLI entrypoints for profwrap commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .component_tree import build_component_tree, render_tree
from .config import ConfigError, load_config
from .engine import InstrumentationEngine
from .logging import configure_logging


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="profwrap",
        description="Find React components and wrap them with a render profiler.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="List exported components found under a project directory.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    scan_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the component tree as JSON.",
    )

    wrap_parser = subparsers.add_parser(
        "wrap",
        help="Wrap components (given as path/to/File.tsx::Name) with the profiler helper.",
    )
    _add_verbose_option(wrap_parser, suppress_default=True)
    wrap_parser.add_argument(
        "targets",
        nargs="+",
        help="Components to wrap, relative to --root, as path::Name.",
    )
    wrap_parser.add_argument(
        "--root",
        default=".",
        help="Project root the targets are relative to (defaults to current directory).",
    )
    wrap_parser.add_argument(
        "--helper",
        help="Path to the file defining the wrapper (searched for when omitted).",
    )
    wrap_parser.add_argument(
        "--module",
        help="Import specifier to use verbatim instead of a relative path to --helper.",
    )
    wrap_parser.add_argument(
        "--symbol",
        help="Name of the wrapper function (defaults to withProfiler).",
    )
    wrap_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the changes as a diff without writing files.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for profwrap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    json_output = bool(getattr(args, "json", False))
    configure_logging(verbose=bool(args.verbose), quiet=json_output, log_file=args.log_file)

    root = Path(args.path if args.command == "scan" else args.root)
    try:
        engine = InstrumentationEngine(config=load_config(root))
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    if args.command == "scan":
        try:
            candidates = engine.scan_components(root)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        tree = build_component_tree(candidates)
        if json_output:
            print(json.dumps([node.to_dict() for node in tree], indent=2))
        elif not tree:
            print("No components found")
        else:
            print("\n".join(render_tree(tree)))
    elif args.command == "wrap":
        if args.symbol is not None and not args.symbol.isidentifier():
            parser.exit(1, f"--symbol must be a valid identifier, got {args.symbol!r}\n")
        dry_run = bool(getattr(args, "dry_run", False))
        report = engine.wrap_components(
            root,
            args.targets,
            helper_path=args.helper,
            import_module=args.module,
            symbol=args.symbol,
            dry_run=dry_run,
        )
        if dry_run:
            for outcome in report.outcomes:
                if outcome.diff:
                    print(outcome.diff, end="")
        print(
            f"Wrapped {report.succeeded} component(s), "
            f"{report.failed} failed, {report.skipped} skipped"
            + (" (dry-run)" if dry_run else "")
        )
        for target, message in sorted(report.errors.items()):
            print(f"  {target}: {message}")
        if report.failed and not report.succeeded:
            parser.exit(1)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
