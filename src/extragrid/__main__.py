"""CLI entry point for extragrid.

Usage:
    python -m extragrid info <document.json>
    python -m extragrid convert <document.json> <output.{json,xlsx,csv}> [--native]
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from extragrid.codec import load_json, selection_to_a1, to_native_json, to_spreadsheet_json
from extragrid.config import get_settings
from extragrid.exceptions import GridError
from extragrid.file_reader import read_spreadsheet_file
from extragrid.logging import setup_logging
from extragrid.utils import cell_to_a1
from extragrid.writer import CsvWriter, OpenpyxlWriter, build_workbook_payload, export_workbook


def cmd_info(args: argparse.Namespace) -> int:
    """Print the grid size, merges and selection of a document."""
    imported = load_json(read_spreadsheet_file(Path(args.document)))
    model = imported.model
    print(f"Grid: {model.rows} rows x {model.cols} cols")
    if imported.sheet_name:
        print(f"Sheet: {imported.sheet_name}")
    filled = sum(1 for row in model.data for value in row if value)
    print(f"Non-empty cells: {filled}")
    print(f"Styled cells: {len(model.cell_styles)}")
    if model.merges:
        print(f"Merges ({len(model.merges)}):")
        for merge in model.merges:
            print(f"  {merge.to_a1()}")
    if imported.selection is not None:
        print(f"Selection: {selection_to_a1(imported.selection)}")
    if model.default_style:
        print(f"Default style: {json.dumps(model.default_style, ensure_ascii=False)}")
    print(f"Last cell: {cell_to_a1(model.rows - 1, model.cols - 1)}")
    return 0


def cmd_convert(args: argparse.Namespace) -> int:
    """Convert a document to interchange JSON, native JSON, xlsx or csv."""
    settings = get_settings()
    imported = load_json(read_spreadsheet_file(Path(args.document)))
    output = Path(args.output)
    suffix = output.suffix.lower()

    if suffix == ".xlsx":
        written = export_workbook(
            imported.model, output, OpenpyxlWriter(), sheet_name=settings.sheet_name
        )
    elif suffix == ".csv":
        payload = build_workbook_payload(imported.model, sheet_name=settings.sheet_name)
        written = CsvWriter().write(payload, output)
    elif suffix == ".json":
        if args.native:
            document = to_native_json(imported.model)
        else:
            document = to_spreadsheet_json(
                imported.model, imported.selection, sheet_name=settings.sheet_name
            )
        output.write_text(
            json.dumps(document, indent=settings.json_indent, ensure_ascii=False),
            encoding="utf-8",
        )
        written = output
    else:
        print(f"Error: Unsupported output type: {output.suffix or output.name}", file=sys.stderr)
        return 1

    print(f"Wrote {written}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extragrid",
        description="Inspect and convert editable grid documents",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # info subcommand
    info_parser = subparsers.add_parser(
        "info",
        help="Show grid size, merges and selection of a document",
    )
    info_parser.add_argument(
        "document",
        help="Interchange or native JSON document",
    )
    info_parser.set_defaults(func=cmd_info)

    # convert subcommand
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert a document to .json, .xlsx or .csv",
    )
    convert_parser.add_argument(
        "document",
        help="Interchange or native JSON document",
    )
    convert_parser.add_argument(
        "output",
        help="Output path; the suffix selects the format",
    )
    convert_parser.add_argument(
        "--native",
        action="store_true",
        help="Write the dense native model instead of interchange JSON",
    )
    convert_parser.set_defaults(func=cmd_convert)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    settings = get_settings()
    setup_logging(json_logs=settings.json_logs, log_level=settings.log_level)

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        result: int = args.func(args)
    except GridError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return result


if __name__ == "__main__":
    sys.exit(main())
