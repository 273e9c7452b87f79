#!/usr/bin/env python3
"""
FlashFlow: AI-assisted flash loan builder

Main entry point for the scripted CLI. `python flashflow.py` (or the `tui`
command) opens the full-screen dashboard instead.
"""

import argparse
import asyncio
import math
import sys
from pathlib import Path
from typing import Optional

from cli.main import FlashFlowCLI
from core.config_manager import PROVIDERS, TASK_TYPES, ConfigManager
from core.errors import FlashFlowError, FormValidationError
from core.logging_setup import setup_logging
from core.models import SUPPORTED_ASSETS


def finite_float(value: str) -> float:
    """argparse type for amounts: any finite number (range checks happen in the form)."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"amount must be a finite number: {value!r}")
    return number


def _read_logic(args) -> Optional[str]:
    if getattr(args, "logic_file", None):
        return Path(args.logic_file).expanduser().read_text()
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="FlashFlow: describe a flash loan strategy, let an LLM write and assess it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  flashflow-cli generate --asset ETH --amount 1000
  flashflow-cli simulate --asset DAI --amount 50000 --logic-file strategy.sol
  flashflow-cli run --asset ETH --amount 1000 --execute
        """,
    )

    # Global options
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    parser.add_argument("--config", default=None, help="Path to config file (default: ~/.flashflow/config.yaml)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    assets = list(SUPPORTED_ASSETS)

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate execution logic from a strategy")
    gen_parser.add_argument("--asset", choices=assets, help="Asset to borrow (default from config)")
    gen_parser.add_argument("--amount", type=finite_float, help="Amount to borrow (default from config)")
    gen_parser.add_argument("--strategy", default="", help="Strategy in natural language (default: arbitrage example)")

    # Simulate command
    sim_parser = subparsers.add_parser("simulate", help="Assess the viability of a flash loan")
    sim_parser.add_argument("--asset", choices=assets, help="Asset to borrow (default from config)")
    sim_parser.add_argument("--amount", type=finite_float, help="Amount to borrow (default from config)")
    sim_source = sim_parser.add_mutually_exclusive_group(required=True)
    sim_source.add_argument("--logic-file", help="File containing the execution logic")
    sim_source.add_argument("--strategy", help="Generate the execution logic from this strategy first")

    # Risk command
    risk_parser = subparsers.add_parser("risk", help="Detailed risk report for execution logic")
    risk_parser.add_argument("--logic-file", required=True, help="File containing the execution logic")
    risk_parser.add_argument("--asset", choices=assets, default="", help="Asset used for profit formatting")

    # Run command (full pipeline)
    run_parser = subparsers.add_parser("run", help="Generate, simulate and optionally execute")
    run_parser.add_argument("--asset", choices=assets, help="Asset to borrow (default from config)")
    run_parser.add_argument("--amount", type=finite_float, help="Amount to borrow (default from config)")
    run_parser.add_argument("--strategy", default="", help="Strategy in natural language (default: arbitrage example)")
    run_parser.add_argument("--execute", action="store_true", help="Execute the loan when the simulation is viable")

    # TUI command
    subparsers.add_parser("tui", help="Open the full-screen dashboard")

    # Config command
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("--show", action="store_true", help="Show current configuration")
    config_parser.add_argument("--set-openai-key", help="Set OpenAI API key")
    config_parser.add_argument("--set-gemini-key", help="Set Gemini API key")
    config_parser.add_argument("--set-provider", choices=PROVIDERS, help="Provider for all tasks (or --task)")
    config_parser.add_argument("--task", choices=TASK_TYPES, help="Limit --set-provider to one task")

    # Version command
    subparsers.add_parser("version", help="Show version information")

    return parser


def _run_config(args, config_manager: ConfigManager) -> int:
    if args.set_openai_key:
        config_manager.set_openai_key(args.set_openai_key)
        print("✅ OpenAI API key saved")
        return 0
    if args.set_gemini_key:
        config_manager.set_gemini_key(args.set_gemini_key)
        print("✅ Gemini API key saved")
        return 0
    if args.set_provider:
        config_manager.set_provider(args.set_provider, args.task)
        print(f"✅ Provider set to {args.set_provider}")
        return 0
    if args.show:
        config_manager.show_config()
        return 0
    return 1


def main(argv=None) -> int:
    """Main entry point for the FlashFlow CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config_manager = ConfigManager(args.config) if args.config else ConfigManager()
    config = config_manager.config

    if args.command == "tui":
        from flashflow import run_tui
        return run_tui(config_manager, verbose=args.verbose)

    setup_logging(verbose=args.verbose, level=config.log_level, log_file=config.log_file)

    if args.command == "config":
        rc = _run_config(args, config_manager)
        if rc:
            print("No config option given (see: config --help)")
        return rc

    cli = FlashFlowCLI(config_manager=config_manager, json_output=args.json)
    if args.command == "version":
        cli.show_version()
        return 0

    asset = getattr(args, "asset", None)
    if asset is None:
        asset = config.default_asset
    amount = getattr(args, "amount", None)
    if amount is None:
        amount = float(config.default_amount)

    try:
        if args.command == "generate":
            asyncio.run(cli.generate(asset, amount, args.strategy))
        elif args.command == "simulate":
            logic = _read_logic(args)
            if logic is None:
                logic = asyncio.run(cli.generate(asset, amount, args.strategy)).execution_logic
            asyncio.run(cli.simulate(asset, amount, logic))
        elif args.command == "risk":
            asyncio.run(cli.risk(_read_logic(args), asset=args.asset))
        elif args.command == "run":
            return asyncio.run(cli.run(asset, amount, args.strategy, execute=args.execute))

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 1
    except FormValidationError as e:
        print(f"Error: {e.title}")
        for field, message in e.field_errors.items():
            print(f"  {field}: {message}")
        return 1
    except (FlashFlowError, OSError) as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
