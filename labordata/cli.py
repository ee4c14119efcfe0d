"""
labordata/cli.py

Command-line front end for the labor-market data client.

How to run locally:
  python -m labordata.cli snapshot
  labordata wages 15-1252 --area CA --offer 145000
  labordata compare 15-1252 S0600000 S4800000 M0035620
  labordata series --format wide --out data/bls_monthly.csv

Environment variables (see labordata.config.load_settings):
- BLS_API_KEY (optional): v2 registration key.
- LABORDATA_ENDPOINT (optional): proxy URL; the key then stays server-side.
- LABORDATA_CACHE_PATH (optional): where cached results live.

Every data command prints the record as JSON. Warnings go to stderr as
"[warn] ..." lines; failures print "[error] ..." and exit with status 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from labordata import analytics
from labordata.bls_api import records_to_frame, records_to_wide
from labordata.config import DEFAULT_YEARS_BACK, SERIES_META, load_settings
from labordata.errors import BLSError, Result
from labordata.models import YearRange
from labordata.series_ids import Unparseable, decode
from labordata.service import LaborMarketService


def _utc_now_iso() -> str:
    """Return the current UTC timestamp as ISO string (no microseconds)."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _emit(result: Result[Any]) -> Any:
    """Print warnings, then return the data (raises BLSError on failure)."""
    for warning in result.warnings:
        print(f"[warn] {warning}", file=sys.stderr)
    data = result.unwrap()
    if hasattr(data, "to_dict"):
        print(json.dumps(data.to_dict(), indent=2))
    else:
        print(json.dumps(data, indent=2))
    return data


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------
async def cmd_wages(service: LaborMarketService, args: argparse.Namespace) -> None:
    wages = _emit(await service.get_occupation_wages(args.occupation, args.area))
    if args.offer is None:
        return

    ladder = wages.annual.percentiles()
    if ladder is None:
        print("[warn] Wage ladder is incomplete; cannot rank the offer", file=sys.stderr)
        return
    try:
        rank = analytics.percentile_rank(args.offer, ladder)
        gauge = analytics.gauge_position(args.offer, ladder)
    except ValueError as e:
        print(f"[warn] Cannot rank the offer: {e}", file=sys.stderr)
        return
    print(
        f"Offer ${args.offer:,.0f} ranks at the {rank:.0f}th percentile "
        f"({analytics.offer_assessment(rank)}); "
        f"gauge position {gauge:.0f}/100"
    )


async def cmd_employment(service: LaborMarketService, args: argparse.Namespace) -> None:
    _emit(await service.get_occupation_employment(args.occupation, args.area))


async def cmd_unemployment(service: LaborMarketService, args: argparse.Namespace) -> None:
    if args.state:
        _emit(await service.get_state_unemployment(args.state))
    else:
        _emit(await service.get_national_unemployment())


async def cmd_snapshot(service: LaborMarketService, args: argparse.Namespace) -> None:
    _emit(await service.get_labor_market_snapshot())


async def cmd_compare(service: LaborMarketService, args: argparse.Namespace) -> None:
    _emit(await service.compare_regional_wages(args.occupation, args.areas))


async def cmd_outlook(service: LaborMarketService, args: argparse.Namespace) -> None:
    _emit(await service.get_career_outlook(args.occupation))


async def cmd_series(service: LaborMarketService, args: argparse.Namespace) -> None:
    """
    Export raw monthly observations to CSV (bypasses the cache).

    Also writes a build_info.json next to the CSV describing the request.
    """
    series_ids = args.series or list(SERIES_META)
    year_range = None
    if args.start_year is not None or args.end_year is not None:
        end = args.end_year if args.end_year is not None else datetime.now().year
        start = args.start_year if args.start_year is not None else end - DEFAULT_YEARS_BACK
        year_range = YearRange(start=start, end=end)
    result = await service.fetcher.fetch_series(series_ids, year_range)
    for warning in result.warnings:
        print(f"[warn] {warning}", file=sys.stderr)
    records = result.unwrap()

    df = records_to_wide(records) if args.format == "wide" else records_to_frame(records)
    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, index=False)

    build_info = {
        "generated_at_utc": _utc_now_iso(),
        "endpoint": service.fetcher.endpoint,
        "format": args.format,
        "min_date": str(df["date"].min().date()) if not df.empty else None,
        "max_date": str(df["date"].max().date()) if not df.empty else None,
        "n_rows": int(df.shape[0]),
        "series": {sid: SERIES_META.get(sid, {}) for sid in series_ids},
    }
    info_path = out.with_name("build_info.json")
    info_path.write_text(json.dumps(build_info, indent=2))

    print(f"Wrote {len(df)} rows ({args.format}) to {out}")


def cmd_decode(args: argparse.Namespace) -> int:
    status = 0
    for series_id in args.series_ids:
        parsed = decode(series_id)
        if isinstance(parsed, Unparseable):
            print(f"[error] {parsed.raw}: {parsed.reason}", file=sys.stderr)
            status = 1
            continue
        print(json.dumps({"survey": parsed.survey, **asdict(parsed)}, indent=2))
    return status


COMMANDS = {
    "wages": cmd_wages,
    "employment": cmd_employment,
    "unemployment": cmd_unemployment,
    "snapshot": cmd_snapshot,
    "compare": cmd_compare,
    "outlook": cmd_outlook,
    "series": cmd_series,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="labordata", description="Query BLS labor-market data.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log cache and fetch activity.")
    parser.add_argument("--refresh", action="store_true", help="Clear the cache before running.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("wages", help="Wage percentiles for an occupation.")
    p.add_argument("occupation", help='SOC code, e.g. "15-1252".')
    p.add_argument("--area", default=None, help='State ("CA"), area code ("M0035620") or metro key.')
    p.add_argument("--offer", type=float, default=None, help="Annual salary to rank.")

    p = sub.add_parser("employment", help="Employment count for an occupation.")
    p.add_argument("occupation")
    p.add_argument("--area", default=None)

    p = sub.add_parser("unemployment", help="National (or state) unemployment.")
    p.add_argument("--state", default=None, help='Postal abbreviation, e.g. "TX".')

    sub.add_parser("snapshot", help="National labor-market snapshot.")

    p = sub.add_parser("compare", help="Compare median wages across areas.")
    p.add_argument("occupation")
    p.add_argument("areas", nargs="+", help="First area with data is the base region.")

    p = sub.add_parser("outlook", help="Career outlook for an occupation.")
    p.add_argument("occupation")

    p = sub.add_parser("series", help="Export raw monthly series to CSV.")
    p.add_argument("--series", nargs="+", default=None, help="Defaults to the tracked national series.")
    p.add_argument("--start-year", type=int, default=None)
    p.add_argument("--end-year", type=int, default=None, help="Defaults to the current year.")
    p.add_argument("--format", choices=["tidy", "wide"], default="tidy")
    p.add_argument("--out", default="data/bls_monthly.csv")

    p = sub.add_parser("decode", help="Break series IDs into their components.")
    p.add_argument("series_ids", nargs="+")

    sub.add_parser("clear-cache", help="Remove every cached entry.")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    CLI entrypoint so the module can be run with:
        python -m labordata.cli <command>
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "decode":
        return cmd_decode(args)

    try:
        service = LaborMarketService.from_settings(load_settings())
    except ValueError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    if args.refresh or args.command == "clear-cache":
        removed = service.clear_cache()
        if args.command == "clear-cache":
            print(f"Removed {removed} cached entries.")
            return 0

    try:
        asyncio.run(COMMANDS[args.command](service, args))
    except BLSError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
