#!/usr/bin/env python3
"""
fieldgen CLI

Resolve a resource's fields from a shape graph and a generator config.

Usage:
    python -m fieldgen resolve --shapes model.yaml --config generator.yaml --resource Function
    python -m fieldgen columns --shapes model.yaml --resource Function --wide
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .config import GeneratorConfig, find_config_path, load_generator_config
from .errors import ConfigError, ResolutionFailed, ShapeGraphError
from .resolver import resolve_fields
from .schema import ResolvedFieldSet
from .shapes import load_shape_graph

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RESOLUTION_FAILED = 1
EXIT_LOAD_ERROR = 2


# ============================================================================
# Output
# ============================================================================

def build_table(field_set: ResolvedFieldSet) -> Table:
    """Human-readable table of resolved fields."""
    table = Table(box=None, pad_edge=False, show_edge=False)
    for header in ("FIELD", "SLOT", "TYPE", "FLAGS"):
        table.add_column(header, no_wrap=True)

    for f in field_set:
        flags = [
            label for label, on in (
                ("primary-key", f.is_primary_key),
                ("arn", f.is_arn),
                ("owner-account-id", f.is_owner_account_id),
                ("attribute", f.is_attribute_unpacked),
                ("secret", f.is_secret),
                ("immutable", f.is_immutable),
                ("required", f.is_required),
                ("compare-ignored", f.compare_policy.is_ignored),
                ("nil-equals-zero", f.compare_policy.nil_equals_zero_value),
                ("late-init", f.late_init_policy is not None),
            ) if on
        ]
        table.add_row(f.name, f.slot.value, f.type_name, ",".join(flags) or "-")
    return table


def print_diagnostics(diagnostics) -> None:
    for diagnostic in diagnostics:
        print(str(diagnostic), file=sys.stderr)


# ============================================================================
# Commands
# ============================================================================

def _load(args) -> tuple:
    graph = load_shape_graph(Path(args.shapes))
    config_path: Optional[Path] = Path(args.config) if args.config else find_config_path()
    config = load_generator_config(config_path) if config_path else GeneratorConfig()
    return graph, config


def cmd_resolve(args) -> int:
    try:
        graph, config = _load(args)
    except (ConfigError, ShapeGraphError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    try:
        field_set = resolve_fields(graph, args.resource, config)
    except ResolutionFailed as e:
        print_diagnostics(e.diagnostics)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RESOLUTION_FAILED

    print_diagnostics(field_set.diagnostics)
    if args.format == "json":
        print(json.dumps(field_set.to_dict(), indent=2, sort_keys=True))
    else:
        Console(markup=False, highlight=False).print(build_table(field_set))
    return EXIT_OK


def cmd_columns(args) -> int:
    try:
        graph, config = _load(args)
    except (ConfigError, ShapeGraphError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    try:
        field_set = resolve_fields(graph, args.resource, config)
    except ResolutionFailed as e:
        print_diagnostics(e.diagnostics)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RESOLUTION_FAILED

    print("\t".join(field_set.column_headers(wide=args.wide)))
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="fieldgen",
        description="Resolve resource fields from an API shape graph and generator config",
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    def add_common(sub):
        sub.add_argument('--shapes', required=True, help='Shape graph document (YAML or JSON)')
        sub.add_argument('--config', help='Generator config (default: ./generator.yaml if present)')
        sub.add_argument('--resource', required=True, help='Resource name, e.g. Function')

    resolve_parser = subparsers.add_parser('resolve', help='Resolve and print all fields')
    add_common(resolve_parser)
    resolve_parser.add_argument('--format', choices=['json', 'table'], default='table')
    resolve_parser.set_defaults(func=cmd_resolve)

    columns_parser = subparsers.add_parser('columns', help='Print listing column headers')
    add_common(columns_parser)
    columns_parser.add_argument('--wide', action='store_true', help='Include wide-view columns')
    columns_parser.set_defaults(func=cmd_columns)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
