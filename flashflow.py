#!/usr/bin/env python3
"""
FlashFlow: AI-assisted flash loan builder

Primary entry point. Launches the full-screen Textual dashboard.

Usage:
    python flashflow.py          # Dashboard (recommended)
    python main.py <command>     # Scripted CLI for automation
"""

import sys
from typing import Optional

from core.config_manager import ConfigManager
from core.logging_setup import setup_logging


def run_tui(config_manager: Optional[ConfigManager] = None, verbose: bool = False) -> int:
    """Open the dashboard. Log records go to the log file only."""
    config_manager = config_manager or ConfigManager()
    config = config_manager.config
    setup_logging(verbose=verbose, level=config.log_level, log_file=config.log_file, console=False)

    from cli.tui.app import FlashFlowApp

    app = FlashFlowApp(config_manager=config_manager)
    return app.run() or 0


def main() -> int:
    return run_tui(verbose="--verbose" in sys.argv[1:] or "-v" in sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
