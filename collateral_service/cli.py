"""Command-line interface for the collateral service."""
from __future__ import annotations

import argparse
import sys
from typing import Sequence

from .api import run_server
from .config import load_config
from .logging_setup import configure_logging
from .models import AccountValuation, CollateralResult
from .services import build_calculator

DEMO_ACCOUNTS = ("E1", "E2")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="collateral-service",
        description="Per-account collateral valuation service",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root, else built-in data)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Run the HTTP API")
    sub.add_parser("demo", help="Value the demo accounts and show the breakdown")

    calc_parser = sub.add_parser("calculate", help="Value the given accounts")
    calc_parser.add_argument("accounts", nargs="+", help="Account identifiers")

    return parser


def format_results(results: Sequence[CollateralResult]) -> str:
    """Render results as a two-column table."""
    lines = [
        "┌─────────────┬──────────────────┐",
        "│ Account ID  │ Collateral Value │",
        "├─────────────┼──────────────────┤",
    ]
    for r in results:
        lines.append(f"│ {r.account_id:<11} │ {r.collateral_value:>16,.2f} │")
    lines.append("└─────────────┴──────────────────┘")
    return "\n".join(lines)


def format_breakdown(valuations: Sequence[AccountValuation]) -> str:
    """Render each account's line items and total."""
    blocks: list[str] = []
    for v in valuations:
        lines = [f"Account {v.account_id} Positions:"]
        for p in v.positions:
            status = "eligible" if p.eligible else "ineligible"
            lines.append(
                f"  - {p.asset_id}: {p.quantity} units × ${p.price:,.2f} × "
                f"{p.discount:.2f} = ${p.value:,.2f} ({status})"
            )
        lines.append(f"  Total {v.account_id}: ${v.total:,.2f}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "serve":
        run_server(config)
        return

    calculator = build_calculator(config.dataset)

    if args.command == "calculate":
        print(format_results(calculator.calculate_collateral(args.accounts)))
    elif args.command == "demo":
        valuations = calculator.evaluate(DEMO_ACCOUNTS)
        results = [CollateralResult(v.account_id, v.total) for v in valuations]
        print("=== COLLATERAL CALCULATION RESULTS ===")
        print(format_results(results))
        print()
        print("=== CALCULATION BREAKDOWN ===")
        print(format_breakdown(valuations))
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _run(args)
