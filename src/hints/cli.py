"""
CLI for resolving reflective-access hints.

Reads a fact base snapshot produced by the classpath scanner, collects
hints from the built-in sources and any JSON hint databases, and prints
the resolved access map.
"""

import argparse
import logging
import sys
from pathlib import Path

from src.config import Settings, load_settings
from src.hints.errors import HintSourceError
from src.hints.facts import load_fact_base
from src.hints.pipeline import Resolution, resolve_hints
from src.hints.registry import HintRegistry
from src.hints.sources import HINT_SOURCES, HintSource, JsonHintSource, load_sources

logger = logging.getLogger(__name__)


def _collect_sources(args, settings: Settings) -> list[HintSource]:
    """Built-in sources first, then JSON databases, in the order given."""
    sources: list[HintSource] = []
    if not args.no_builtin:
        sources.extend(load_sources(args.source or settings.hint_sources))
    for path in [*settings.hint_files, *(args.hints or [])]:
        sources.append(JsonHintSource(path))
    return sources


def _resolve(args, settings: Settings) -> Resolution:
    facts_path = args.facts or settings.facts_path
    if facts_path is None:
        raise HintSourceError("No fact base snapshot given (use --facts or HINTS_FACTS)")

    facts = load_fact_base(facts_path)
    registry = HintRegistry.build(_collect_sources(args, settings))
    return resolve_hints(registry, facts)


def _print_diagnostics(resolution: Resolution) -> None:
    for warning in resolution.warnings:
        print(f"warning: {warning}", file=sys.stderr)


def cmd_resolve(args, settings: Settings) -> int:
    """Resolve hints and write the access map."""
    resolution = _resolve(args, settings)
    access_map = resolution.access_map

    fmt = args.format or settings.dump_format
    if fmt == "json":
        output = access_map.to_json()
    else:
        output = access_map.to_text(include_units=args.with_units)

    if args.output:
        Path(args.output).write_text(output)
        logger.info(f"Wrote {len(access_map)} entries to {args.output}")
    else:
        sys.stdout.write(output)

    if args.show_active:
        print(f"\nActive units ({len(resolution.active_set)}):", file=sys.stderr)
        for unit in resolution.active_set:
            print(f"  {resolution.active_set.activation(unit)}", file=sys.stderr)

    _print_diagnostics(resolution)
    if args.strict and resolution.diagnostics:
        return 1
    return 0


def cmd_explain(args, settings: Settings) -> int:
    """Explain why a type has reflective access."""
    resolution = _resolve(args, settings)
    access_map = resolution.access_map

    if args.type_name not in access_map:
        print(f"{args.type_name}: no reflective access (no active unit requests it)")
        return 1

    print(f"{args.type_name} = {str(access_map[args.type_name])}")
    for trace in resolution.explain(args.type_name):
        print(f"  requested by {trace.unit}: {trace}")
    return 0


def cmd_sources(args, settings: Settings) -> int:
    """List built-in hint sources."""
    print(f"\n{'Source':<20} {'Units':<8} {'Records':<8} {'Enabled':<8}")
    print("-" * 48)
    for name, factory in HINT_SOURCES.items():
        source = factory()
        enabled = "yes" if name in settings.hint_sources else "no"
        print(
            f"{name:<20} "
            f"{len(list(source.configuration_units())):<8} "
            f"{len(list(source.all_hint_records())):<8} "
            f"{enabled:<8}"
        )
    return 0


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--facts", type=Path, help="Fact base snapshot (JSON)")
    parser.add_argument(
        "--hints", type=Path, action="append", help="JSON hint database (repeatable)"
    )
    parser.add_argument(
        "--source",
        action="append",
        choices=sorted(HINT_SOURCES),
        help="Built-in hint source (repeatable, default: from settings)",
    )
    parser.add_argument(
        "--no-builtin", action="store_true", help="Use only the given JSON hint databases"
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Resolve reflective-access hints for a closed world")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Resolve hints into an access map")
    _add_input_args(resolve_parser)
    resolve_parser.add_argument("--format", choices=["text", "json"], help="Output format")
    resolve_parser.add_argument("--output", help="Write the access map to this file")
    resolve_parser.add_argument(
        "--with-units", action="store_true", help="Annotate text output with contributing units"
    )
    resolve_parser.add_argument(
        "--show-active", action="store_true", help="List active units on stderr"
    )
    resolve_parser.add_argument(
        "--strict", action="store_true", help="Exit with status 1 when problems were reported"
    )

    # Explain command
    explain_parser = subparsers.add_parser("explain", help="Explain why a type has access")
    explain_parser.add_argument("type_name", help="Fully-qualified type name")
    _add_input_args(explain_parser)

    # Sources command
    subparsers.add_parser("sources", help="List built-in hint sources")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        return 1
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "resolve": cmd_resolve,
        "explain": cmd_explain,
        "sources": cmd_sources,
    }

    try:
        return commands[args.command](args, settings)
    except HintSourceError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
