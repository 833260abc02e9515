"""CLI entry point for the equity scorecard."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from scorecard.analysis import AnalysisResult, analyze, rank_results
from scorecard.config import ScorecardConfig
from scorecard.data import YahooFinanceClient
from scorecard.output.export import (
    export_csv,
    export_json,
    format_table,
    to_json,
    write_csv,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scorecard",
        description="Rate and rank equities on fundamentals and price history",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Score tickers and print or export the ranking"
    )
    analyze_parser.add_argument(
        "tickers",
        nargs="+",
        help="Ticker symbols (e.g. RELIANCE TCS AAPL.US)",
    )
    analyze_parser.add_argument(
        "--suffix",
        default=None,
        help="Exchange suffix for bare tickers (default: .NS)",
    )
    analyze_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: 30)",
    )
    analyze_parser.add_argument(
        "--format",
        choices=["table", "json", "csv"],
        default="table",
        help="Output format (default: table)",
    )
    analyze_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write results to this file instead of stdout",
    )
    analyze_parser.add_argument(
        "--no-rank",
        action="store_true",
        help="Keep input order instead of sorting by final score",
    )
    analyze_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    return _build_parser().parse_args(argv)


def _build_config(args: argparse.Namespace) -> ScorecardConfig:
    config = ScorecardConfig.from_env()
    if args.suffix is not None:
        config.market_suffix = args.suffix
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ValueError(f"--timeout must be positive, got {args.timeout}")
        config.request_timeout = args.timeout
    return config


def _write_results(results: list[AnalysisResult], args: argparse.Namespace) -> None:
    if args.output is None:
        if args.format == "table":
            print(format_table(results))
        elif args.format == "json":
            print(to_json(results))
        else:
            write_csv(results, sys.stdout)
        return

    if args.format == "csv":
        export_csv(results, args.output)
    elif args.format == "json":
        export_json(results, args.output)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(format_table(results) + "\n")
        logger.info("Wrote table to %s", args.output)


def run_analyze(args: argparse.Namespace, config: ScorecardConfig) -> int:
    """Execute the analyze command.

    Args:
        args: Parsed CLI arguments.
        config: Scorecard configuration with CLI overrides applied.

    Returns:
        Process exit code: 1 if every ticker failed, else 0.
    """
    with YahooFinanceClient(config) as client:
        results = analyze(args.tickers, client=client, config=config)

    if not args.no_rank:
        results = rank_results(results)

    _write_results(results, args)

    failed = sum(1 for r in results if r.error is not None)
    if failed:
        logger.warning("%d of %d tickers failed", failed, len(results))
    return 1 if failed == len(results) else 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = _build_config(args)
    except ValueError as e:
        parser.error(str(e))

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "analyze":
        sys.exit(run_analyze(args, config))
    else:
        logger.error("Unknown command: %s", args.command)
        sys.exit(1)


if __name__ == "__main__":
    main()
