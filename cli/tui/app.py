"""
FlashFlow Textual TUI application.

Full-screen dashboard for building, simulating and executing flash loans.
Launch via `python flashflow.py`.
"""

from pathlib import Path
from typing import Optional

from textual.app import App
from textual.binding import Binding

from core.config_manager import DEFAULT_CONFIG_FILE, ConfigManager
from core.llm_usage_tracker import LLMUsageTracker
from core.transaction_manager import TransactionManager
from cli.execution_runner import ExecutionRunner


VERSION = "1.0"


class FlashFlowApp(App):
    """FlashFlow: AI-assisted flash loan builder and transaction dashboard."""

    TITLE = "FlashFlow"
    SUB_TITLE = "AI-Powered Flash Loan Builder"
    CSS_PATH = Path(__file__).parent / "theme.tcss"

    BINDINGS = [
        Binding("n", "new_loan", "New Loan", show=True),
        Binding("a", "about", "About", show=True),
        Binding("s", "settings", "Settings", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        config_file: str = DEFAULT_CONFIG_FILE,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._config_manager = config_manager or ConfigManager(config_file)
        self._tx_manager = TransactionManager.get_instance()
        self._tracker = LLMUsageTracker.get_instance()
        self._execution_runner = ExecutionRunner(delay=self._config_manager.config.simulator_delay)

    def on_mount(self) -> None:
        from cli.tui.screens.main import MainScreen

        self.push_screen(MainScreen())

    # ── Action handlers ──────────────────────────────────────────

    def _push_once(self, screen_cls) -> None:
        """Push a screen unless it is already the active one."""
        if not isinstance(self.screen, screen_cls):
            self.push_screen(screen_cls())

    def action_new_loan(self) -> None:
        from cli.tui.screens.builder import BuilderScreen
        self._push_once(BuilderScreen)

    def action_about(self) -> None:
        from cli.tui.screens.about import AboutScreen
        self._push_once(AboutScreen)

    def action_settings(self) -> None:
        from cli.tui.screens.settings import SettingsScreen
        self._push_once(SettingsScreen)

    def action_quit(self) -> None:
        """Quit the app, with confirmation if loans are still executing."""
        if self._tx_manager.has_active:
            active_count = len(self._tx_manager.get_active())
            from cli.tui.dialogs.confirm import ConfirmDialog

            def _handle_quit_result(confirmed: bool) -> None:
                if confirmed:
                    self.exit(return_code=0)

            self.push_screen(
                ConfirmDialog(
                    message=(
                        f"{active_count} transaction(s) still executing. "
                        "Their results will be lost.\n\n"
                        "Quit anyway?"
                    ),
                    title="Quit FlashFlow",
                ),
                callback=_handle_quit_result,
            )
        else:
            self.exit(return_code=0)

    # ── Properties for screens and widgets ───────────────────────

    @property
    def config_manager(self) -> ConfigManager:
        return self._config_manager

    @property
    def transaction_manager(self) -> TransactionManager:
        return self._tx_manager

    @property
    def tracker(self) -> LLMUsageTracker:
        return self._tracker

    @property
    def execution_runner(self) -> ExecutionRunner:
        return self._execution_runner
