"""Command-line driver for the import and peer batches.

Usage:

  # Import one quarter (period read from the file names)
  ffiec-mcp import "data/FFIEC CDR Call Bulk All Schedules 06302025"

  # Import with an explicit period
  ffiec-mcp import data/2025q2 --period 2025-06-30

  # Peer analysis for the 100 largest banks, every stored quarter
  ffiec-mcp peers

  # One bank, one quarter
  ffiec-mcp peers --bank 480228 --period 2025-06-30

  # Recompute operating leverage from stored income statements
  ffiec-mcp operating-leverage [--bank 480228]

  # Store counts
  ffiec-mcp status
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from ffiec_mcp.errors import FFIECError


def _header(title: str):
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}\n")


def _period(text: str) -> date:
    try:
        if len(text) == 8 and text.isdigit():
            return date(int(text[4:8]), int(text[0:2]), int(text[2:4]))
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a reporting period: {text!r} (use YYYY-MM-DD or MMDDYYYY)")


def cmd_import(args) -> int:
    """Import a directory of Call Report schedules."""
    from ffiec_mcp.importer import import_directory

    _header(f"Import: {args.directory}")
    result = import_directory(args.directory, args.period)
    print()
    print(f"  Period:           {result.reporting_period.isoformat()}")
    print(f"  Institutions:     {result.entities_created}")
    print(f"  Statements:       {result.statements_created}")
    print(f"  Validation errs:  {result.validation_error_count}")
    print(f"  Skipped:          {result.entities_skipped}")
    for issue in result.issues[:20]:
        print(f"    [{issue.idrssd or '?'}] {issue.kind}: {issue.message}")
    if len(result.issues) > 20:
        print(f"    ... {len(result.issues) - 20} more")
    return 0


def cmd_peers(args) -> int:
    """Generate peer analysis for one bank or the top N."""
    from ffiec_mcp import peer_analysis
    from ffiec_mcp.config import get_config
    from ffiec_mcp.db import get_store

    store = get_store()
    if args.bank:
        _header(f"Peer analysis: {args.bank}")
        result = peer_analysis.generate_peer_analysis(args.bank, args.period, store=store)
        if result is None or not result.periods:
            print(f"  No peer analysis generated for {args.bank}")
            return 1
        saved = peer_analysis.save_peer_analysis(result, store)
        print(f"  Saved for {result.name or args.bank} ({saved} periods)")
        return 0

    top = args.top or get_config().top_n
    _header(f"Peer analysis: top {top} banks")
    summary = peer_analysis.generate_all_peer_analyses(top, args.period, store)
    print(f"  Processed: {summary['processed']}")
    print(f"  Errors:    {summary['errors']}")
    return 1 if summary["errors"] else 0


def cmd_operating_leverage(args) -> int:
    """Recompute operating leverage on stored statements."""
    from ffiec_mcp import peer_analysis
    from ffiec_mcp.db import get_store

    _header("Operating leverage")
    updated = peer_analysis.refresh_operating_leverage(get_store(), args.bank)
    print(f"  Updated {updated} statements")
    return 0


def cmd_status(args) -> int:
    """Show MongoDB connection and store counts."""
    from ffiec_mcp.db import get_store

    _header("MongoDB")
    store = get_store()
    print(f"  Institutions:         {store.count_institutions()}")
    print(f"  Financial statements: {store.count_statements()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ffiec-mcp", description="FFIEC Call Report import and peer analytics")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import", help="import one quarter of bulk schedules")
    p.add_argument("directory")
    p.add_argument("--period", type=_period, default=None, help="YYYY-MM-DD or MMDDYYYY")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("peers", help="generate peer analysis")
    p.add_argument("--bank", default=None, help="single bank IDRSSD")
    p.add_argument("--period", type=_period, default=None, help="single quarter")
    p.add_argument("--top", type=int, default=None, help="banks by latest assets (default TOP_N)")
    p.set_defaults(func=cmd_peers)

    p = sub.add_parser("operating-leverage", help="recompute QoQ operating leverage")
    p.add_argument("--bank", default=None, help="single bank IDRSSD")
    p.set_defaults(func=cmd_operating_leverage)

    p = sub.add_parser("status", help="store counts")
    p.set_defaults(func=cmd_status)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except FFIECError as exc:
        print(f"\n  ✗ {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
