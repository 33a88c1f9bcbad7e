"""CLI entry point for weather-risk."""

import argparse
import logging
import os
import sys

from weather_risk.config import VARIABLE_FILES
from weather_risk.errors import WeatherRiskError
from weather_risk.variables import VARIABLE_IDS


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="weather-risk",
        description="Historical weather threshold risk: load, analyze, and serve",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # load subcommand
    load_parser = subparsers.add_parser("load", help="Load variable files and print summaries")
    load_parser.add_argument(
        "--variable", choices=VARIABLE_IDS, action="append",
        help="Variable to load (repeatable, default: all)",
    )

    # analyze subcommand
    analyze_parser = subparsers.add_parser("analyze", help="Risk statistics for a calendar day or day range")
    analyze_parser.add_argument("--variable", required=True, choices=VARIABLE_IDS)
    analyze_parser.add_argument("--month", required=True, type=int)
    analyze_parser.add_argument("--day", required=True, type=int)
    analyze_parser.add_argument("--end-month", type=int, default=None, help="Range end month")
    analyze_parser.add_argument("--end-day", type=int, default=None, help="Range end day")
    analyze_parser.add_argument("--threshold", required=True, type=float)
    analyze_parser.add_argument("--start-year", type=int, default=None)
    analyze_parser.add_argument("--end-year", type=int, default=None)

    # serve subcommand
    subparsers.add_parser("serve", help="Start the FastAPI server")

    args = parser.parse_args(argv)

    if args.command == "analyze" and (args.end_month is None) != (args.end_day is None):
        parser.error("--end-month and --end-day must be given together")

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        _serve()
    elif args.command == "load":
        _load(args)
    elif args.command == "analyze":
        _analyze(args)


def _serve() -> None:
    try:
        import uvicorn
        from weather_risk.api.app import create_app  # noqa: F401

        port = int(os.environ.get("PORT", "8000"))
        uvicorn.run("weather_risk.api.app:create_app", factory=True, host="0.0.0.0", port=port)
    except ImportError as e:
        print(f"Missing dependency: {e}", file=sys.stderr)
        sys.exit(1)


def _load(args: argparse.Namespace) -> None:
    from weather_risk.ingest.orchestrator import load_variables
    from weather_risk.store import TimeSeriesStore

    variables = args.variable or list(VARIABLE_FILES)
    store = TimeSeriesStore()
    results = load_variables(store, {v: VARIABLE_FILES[v] for v in variables})

    for r in results:
        if r.ok:
            print(
                f"{r.variable_id:<14} {r.days_loaded:>5} days "
                f"{r.records_loaded:>7} records {r.skipped:>5} skipped"
            )
        else:
            print(f"{r.variable_id:<14} FAILED: {'; '.join(r.errors)}")
    store.close()

    if not any(r.ok for r in results):
        sys.exit(1)


def _analyze(args: argparse.Namespace) -> None:
    from weather_risk.compute.risk import compute_risk_statistics
    from weather_risk.ingest.orchestrator import load_variable
    from weather_risk.store import TimeSeriesStore

    store = TimeSeriesStore()
    result = load_variable(store, args.variable, VARIABLE_FILES[args.variable])
    if not result.ok:
        print(f"Could not load {args.variable}: {'; '.join(result.errors)}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.end_month is None:
            sample = store.yearly_sample(
                args.variable, args.month, args.day, args.start_year, args.end_year,
            )
        else:
            sample = store.yearly_range_sample(
                args.variable,
                (args.month, args.day),
                (args.end_month, args.end_day),
                args.start_year,
                args.end_year,
            )
        stats = compute_risk_statistics(sample, args.threshold, args.variable)
    except WeatherRiskError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    finally:
        store.close()

    descriptor = store.describe(args.variable)
    period = f"{args.month:02d}-{args.day:02d}"
    if args.end_month is not None:
        period += f" to {args.end_month:02d}-{args.end_day:02d}"
    print(f"{args.variable} {period} "
          f"{descriptor.adverse_operator.value} {stats.threshold:g} {descriptor.unit}")
    print(f"  years:       {stats.sample_size}")
    print(f"  probability: {stats.probability_percent:.2f}%")
    print(f"  mean:        {stats.mean:.2f} {descriptor.unit}")
    print(f"  trend:       {stats.trend_change_percent:+.2f} pp")
    print(f"  {stats.trend_description}")
    if stats.summary is not None:
        s = stats.summary
        print(f"  median {s.median:.2f}  q1 {s.q1:.2f}  q3 {s.q3:.2f}  sd {s.standard_deviation:.2f}")


if __name__ == "__main__":
    main()
