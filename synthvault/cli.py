"""Command-line interface for the synthetic-asset engine."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import load_config
from .logging_setup import configure_logging
from .oracles import PythOracle
from .services import ScenarioRunner, build_system, fetch_live_prices, load_scenario


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="synthvault",
        description="Overcollateralized synthetic-asset engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    run_parser = sub.add_parser("run", help="Replay a scenario file against a fresh engine")
    run_parser.add_argument("scenario", help="Path to a scenario YAML file")
    run_parser.add_argument(
        "--live-prices",
        action="store_true",
        help="Start from live Pyth prices instead of the configured static prices",
    )

    sub.add_parser("prices", help="Fetch and print live Pyth prices for configured assets")

    return parser


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; returns the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "run":
        prices = await fetch_live_prices(config) if args.live_prices else None
        system = build_system(config, prices)
        runner = ScenarioRunner(system)
        result = runner.run(load_scenario(args.scenario))

        for step in result.steps:
            status = "ok" if step.ok else f"{step.error}: {step.message}"
            flag = "" if step.matched else f"  (expected {step.expected})"
            print(f"[{step.index:>3}] {step.op:<18} {status}{flag}")
        print()
        print(runner.account_report())
        return 0 if result.all_matched else 1

    if args.command == "prices":
        oracle = PythOracle(config.price_oracle.pyth)
        points = await oracle.fetch_price_points([a.symbol for a in config.assets])
        if not points:
            print("No prices fetched.")
            return 1
        for symbol, point in sorted(points.items()):
            print(f"{symbol}: {point.price / 10**point.decimals:,.4f}")
        return 0

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
