"""Tool for dumping table contents to the console."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from tablescope.errors import TablescopeError
from tablescope.scanner import count_rows, scan_rows
from tablescope.schema_reader import list_columns, list_tables
from tablescope.types import (
    ColumnDescriptor,
    DatabaseHandle,
    ListDisplay,
    Row,
    SortSpec,
    display_text,
)

DEFAULT_PAGE_SIZE = 50


def configure_logging(verbose: bool = False) -> None:
    """Send structlog output to stderr, at DEBUG when verbose and WARNING otherwise."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def cell_to_json(cell: Any) -> Any:
    """Convert a cell to a JSON-compatible value."""
    if isinstance(cell, ListDisplay):
        return str(cell)
    return cell


def print_tables(handle: DatabaseHandle) -> None:
    """List all tables with their row counts."""
    print("Available tables:")
    print("-" * 40)
    for name in list_tables(handle):
        print(f"  {name:<28} {count_rows(handle, name):>8} rows")


def print_schema(columns: list[ColumnDescriptor]) -> None:
    """Print column descriptors, one per line."""
    for i, column in enumerate(columns):
        nullable = "nullable" if column.nullable else "required"
        target = f" -> {column.link_target}" if column.link_target else ""
        print(f"  {i:>3}  {column.name:<20} {column.type_name:<14} {nullable}{target}")


def print_rows(columns: list[ColumnDescriptor], rows: list[Row]) -> None:
    """Print rows as a text table."""
    texts = [[display_text(cell) for cell in row.cells] for row in rows]
    widths = [
        max([len(column.name)] + [len(t[i]) for t in texts])
        for i, column in enumerate(columns)
    ]
    print("#".rjust(6) + "  " + "  ".join(c.name.ljust(w) for c, w in zip(columns, widths)))
    print("-" * (8 + sum(w + 2 for w in widths)))
    for row, cells in zip(rows, texts):
        print(f"{row.position:>6}  " + "  ".join(t.ljust(w) for t, w in zip(cells, widths)))


def dump_table(
    handle: DatabaseHandle,
    table: str,
    start: int,
    count: int,
    sort: SortSpec | None,
    as_json: bool,
) -> None:
    """Print one page of a table."""
    columns = list_columns(handle, table)
    rows = scan_rows(handle, table, start, count, sort)

    if as_json:
        output = {
            "table": table,
            "total": count_rows(handle, table),
            "start": max(0, start),
            "columns": [
                {"name": c.name, "type": c.type_name, "nullable": c.nullable} for c in columns
            ],
            "rows": [
                {
                    "position": row.position,
                    "cells": {c.name: cell_to_json(cell) for c, cell in zip(columns, row.cells)},
                }
                for row in rows
            ],
        }
        print(json.dumps(output, indent=2))
        return

    total = count_rows(handle, table)
    print(f"Table: {table}")
    print(f"Rows: {total}")
    print()
    print_rows(columns, rows)
    remaining = total - max(0, start) - len(rows)
    if remaining > 0:
        print(f"... ({remaining} more rows)")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Dump table contents of a database to the console"
    )
    parser.add_argument(
        "data_dir",
        type=Path,
        help="Path to the database directory",
    )
    parser.add_argument(
        "table",
        nargs="?",
        help="Name of the table to dump (omit to list tables)",
    )
    parser.add_argument(
        "--schema",
        action="store_true",
        help="Show the table's columns instead of its rows",
    )
    parser.add_argument(
        "-s", "--start",
        type=int,
        default=0,
        help="Position in the (sorted) table of the first row to show",
    )
    parser.add_argument(
        "-n", "--count",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help=f"Number of rows to show (default {DEFAULT_PAGE_SIZE})",
    )
    parser.add_argument(
        "--sort",
        metavar="COLUMN",
        default=None,
        help="Sort by COLUMN; prefix with '-' for descending order",
    )
    parser.add_argument(
        "--desc",
        action="store_true",
        help="Sort in descending order",
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log sessions and scans to stderr",
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    handle = DatabaseHandle(args.data_dir)

    try:
        if args.table is None:
            print_tables(handle)
        elif args.schema:
            print(f"Table: {args.table}")
            print_schema(list_columns(handle, args.table))
        else:
            dump_table(
                handle,
                args.table,
                args.start,
                args.count,
                SortSpec.parse(args.sort, args.desc),
                args.json,
            )
    except TablescopeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
