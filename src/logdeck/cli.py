from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import UTC, datetime

from logdeck.core.export import export_records
from logdeck.core.filtering import FilterSpec
from logdeck.core.heuristics import Heuristic, parse_heuristic
from logdeck.core.formats import parse_level
from logdeck.core.session import LogSession
from logdeck.tools.session import build_filter_spec


def _parse_levels(s: str) -> list[str]:
    out = [part.strip() for part in s.split(",") if part.strip()]
    if not out:
        raise argparse.ArgumentTypeError("At least one level must be provided")
    for name in out:
        if parse_level(name) is None:
            raise argparse.ArgumentTypeError(
                "Invalid level. Allowed: ERROR, WARN, INFO, DEBUG, TRACE"
            )
    return out


def _parse_smart(s: str) -> Heuristic:
    try:
        return parse_heuristic(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _read_input(session: LogSession, args: argparse.Namespace) -> None:
    if args.sample is not None:
        session.load_sample(args.sample)
    elif args.log_path == "-":
        session.load(sys.stdin.read())
    elif args.log_path:
        asyncio.run(session.load_file(args.log_path))
    else:
        raise ValueError("Provide a log file, '-' for stdin, or --sample N")


def _build_spec(args: argparse.Namespace, *, now: datetime | None) -> FilterSpec:
    return build_filter_spec(
        search=args.search,
        use_regex=args.regex,
        case_sensitive=args.case_sensitive,
        levels=args.levels,
        heuristics=[h.value for h in args.smart],
        since=args.since,
        until=args.until,
        date=args.date,
        hour=args.hour,
        week=args.week,
        month=args.month,
        preset=args.range,
        now=now,
    )


def main() -> None:
    p = argparse.ArgumentParser(description="Parse, filter and summarize log files.")
    p.add_argument("log_path", nargs="?", help="Log file (.gz ok) or '-' for stdin")
    p.add_argument("--sample", type=int, default=None, metavar="N", help="Use N generated sample lines")
    p.add_argument("--search", default="", help="Text matched against the raw line")
    p.add_argument("--regex", action="store_true", help="Treat --search as a regular expression")
    p.add_argument("--case-sensitive", action="store_true")
    p.add_argument(
        "--levels",
        type=_parse_levels,
        default=None,
        help="Comma-separated (e.g., ERROR,WARN). Default: all levels",
    )
    p.add_argument(
        "--smart",
        type=_parse_smart,
        action="append",
        default=[],
        help="Smart filter (repeatable): criticalOnly, performanceIssues, securityEvents, userActions",
    )
    p.add_argument("--stats", action="store_true", help="Print summary statistics instead of records")
    p.add_argument("--timeline", action="store_true", help="Print the bucketed timeline instead of records")
    p.add_argument("--buckets", type=int, default=None, help="Target number of timeline buckets")
    p.add_argument("--format", choices=["text", "json", "csv"], default="text")
    p.add_argument("--verbose", action="store_true", help="Debug logging on stderr")

    # Time window
    p.add_argument("--range", default=None, help="Lookback preset: 1h, 6h, 12h, 24h, all")
    p.add_argument("--since", default=None, help="ISO8601 start time (assumes UTC if tz missing)")
    p.add_argument("--until", default=None, help="ISO8601 end time (assumes UTC if tz missing)")
    p.add_argument("--date", default=None, help="YYYY-MM-DD (UTC day)")
    p.add_argument("--hour", default=None, help="YYYY-MM-DDTHH (UTC hour)")
    p.add_argument("--week", default=None, help="YYYY-Www (ISO week, UTC)")
    p.add_argument("--month", default=None, help="YYYY-MM (UTC month)")

    args = p.parse_args()
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = LogSession()
    try:
        _read_input(session, args)
        spec = _build_spec(args, now=datetime.now(UTC))
        records = session.apply_filter(spec)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except (ValueError, argparse.ArgumentTypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    if args.stats:
        stats = session.summarize(records)
        print(json.dumps(asdict(stats), indent=2))
        return

    if args.timeline:
        for b in session.timeline(records, args.buckets):
            print(f"{b.bucket_start.isoformat()} total={b.total} error={b.error_count} "
                  f"warn={b.warn_count} info={b.info_count}")
        return

    if args.format != "text":
        print(export_records(records, args.format))
        return

    for r in records:
        print(f"{r.line_no} {r.timestamp.isoformat()} [{r.level.value}] {r.service}: {r.message}")

    print(f"\nFound {len(records)} of {len(session.store)} entries.")


if __name__ == "__main__":
    main()
