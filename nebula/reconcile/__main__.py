"""
CLI entry point for three-way sheet reconciliation.

Usage:
    python -m nebula.reconcile --sheet-a A.xlsx --sheet-b B.xlsx --sheet-c C.xlsx
    python -m nebula.reconcile --sheet-a A.xlsx --sheet-b B.xlsx --sheet-c C.xlsx \
        --key "INVOICE NUMBER" --output-xlsx results.xlsx
    python -m nebula.reconcile --write-templates ./templates
"""

import argparse
import sys
from pathlib import Path

from .config import build_reconcile_config, get_template, load_config
from .matcher import run_reconciliation
from .report import export_csv, export_xlsx, format_console
from .sheet_loader import load_source
from .templates import write_templates


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reconcile",
        description="Sheet Reconciliation - Compare three spreadsheets record by record",
    )

    parser.add_argument("--sheet-a", metavar="FILE", help="Sheet A workbook (XLSX)")
    parser.add_argument("--sheet-b", metavar="FILE", help="Sheet B workbook (XLSX)")
    parser.add_argument("--sheet-c", metavar="FILE", help="Sheet C workbook (XLSX)")

    parser.add_argument(
        "--compare",
        nargs="+",
        metavar="COL",
        help="Columns to compare (default: all headers common to the three sheets)",
    )

    parser.add_argument(
        "--key",
        nargs="+",
        metavar="COL",
        help="Key columns for all sheets (omit for positional matching)",
    )
    parser.add_argument("--key-a", nargs="+", metavar="COL", help="Key columns for sheet A")
    parser.add_argument("--key-b", nargs="+", metavar="COL", help="Key columns for sheet B")
    parser.add_argument("--key-c", nargs="+", metavar="COL", help="Key columns for sheet C")

    parser.add_argument(
        "--config",
        default=None,
        metavar="FILE",
        help="Template config file (default: module's reconcile_config.json)",
    )

    parser.add_argument(
        "--skip-header-check",
        action="store_true",
        help="Only require the template sheet name, not its headers",
    )

    parser.add_argument("--output-xlsx", metavar="FILE", help="Output XLSX file path")
    parser.add_argument("--output-csv", metavar="FILE", help="Output CSV file path")

    parser.add_argument(
        "--write-templates",
        metavar="DIR",
        help="Write blank upload templates to DIR and exit",
    )

    parser.add_argument(
        "--show-matched",
        action="store_true",
        help="Include Matched records in console output",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress console output",
    )

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)

        if args.write_templates:
            paths = write_templates(config, args.write_templates)
            if not args.quiet:
                for path in paths:
                    print(f"Template written: {path}")
            return

        files = {"A": args.sheet_a, "B": args.sheet_b, "C": args.sheet_c}
        missing = [key for key, value in files.items() if not value]
        if missing:
            parser.error(f"missing sheet file(s): {', '.join('--sheet-' + k.lower() for k in missing)}")

        sheets = {}
        for key, file_arg in files.items():
            path = Path(file_arg)
            if not path.exists():
                print(f"Error: Sheet {key} file not found: {path}", file=sys.stderr)
                sys.exit(1)

            template = get_template(config, key)
            sheets[key] = load_source(
                path,
                template,
                allowed_extensions=tuple(config.settings.allowed_extensions),
                check_headers=not args.skip_header_check,
            )
            if not args.quiet:
                print(f"Loaded {template.display_name}: {sheets[key].row_count} rows")

        run_config = build_reconcile_config(
            sheets["A"], sheets["B"], sheets["C"],
            compare_columns=args.compare,
            key_columns=args.key,
            key_columns_a=args.key_a,
            key_columns_b=args.key_b,
            key_columns_c=args.key_c,
        )
        result = run_reconciliation(sheets["A"], sheets["B"], sheets["C"], run_config)

        if not args.quiet:
            print(format_console(result, show_matched=args.show_matched))

        if args.output_xlsx:
            output_path = Path(args.output_xlsx)
            buffer = export_xlsx(
                result,
                sheet_name=config.settings.results_sheet_name,
                summary_title=config.settings.summary_title,
            )
            output_path.write_bytes(buffer.getvalue())
            if not args.quiet:
                print(f"\nXLSX exported to: {output_path}")

        if args.output_csv:
            output_path = Path(args.output_csv)
            with open(output_path, "w", newline="") as f:
                export_csv(result, output=f)
            if not args.quiet:
                print(f"\nCSV exported to: {output_path}")

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
