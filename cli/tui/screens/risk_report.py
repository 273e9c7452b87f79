"""
Risk report screen.

Runs the detailed risk analysis on the current execution logic and shows
the verdict, the risk score, a breakdown table, the rationale and the
simulated P&L curve.
"""

from __future__ import annotations

import logging
from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Label, Static

from core.flows import analyze_transaction_risk
from core.llm_client import LLMClient
from core.models import RiskAnalysis, RiskAnalysisInput
from cli.tui.widgets.pnl_chart import PnLChart

logger = logging.getLogger(__name__)


def risk_score_markup(score: float) -> str:
    """Colour a 1-10 risk score: green up to 3, yellow up to 6, red above."""
    if score <= 3:
        colour = "green"
    elif score <= 6:
        colour = "yellow"
    else:
        colour = "red"
    return f"[bold {colour}]{score:g}/10[/]"


class RiskReportScreen(Screen):
    """Detailed risk analysis of a flash loan's execution logic."""

    BINDINGS = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("r", "rerun", "Re-run", show=True),
    ]

    CSS = """
    RiskReportScreen #risk-body {
        padding: 0 2;
    }

    RiskReportScreen .section-heading {
        text-style: bold;
        color: $accent;
        margin-top: 1;
    }

    RiskReportScreen #risk-breakdown {
        height: auto;
        max-height: 12;
    }
    """

    def __init__(
        self,
        execution_logic: str,
        asset: str = "",
        client: Optional[LLMClient] = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.execution_logic = execution_logic
        self.asset = asset
        self._client = client
        self.result: Optional[RiskAnalysis] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="risk-body"):
            yield Static("[bold cyan]Risk Report[/bold cyan]", id="risk-title")
            yield Static("Analyzing execution logic...", id="risk-status")
            yield Label("Simulated P&L", classes="section-heading")
            yield PnLChart(id="risk-pnl")
            yield Label("Risk Breakdown", classes="section-heading")
            yield DataTable(id="risk-breakdown", cursor_type="row", zebra_stripes=True)
            yield Label("Rationale", classes="section-heading")
            yield Static("", id="risk-rationale", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        self.title = "Risk Report"
        self.query_one("#risk-breakdown", DataTable).add_columns("Risk", "Description")
        self.action_rerun()

    def action_rerun(self) -> None:
        self.run_worker(self._analyze(), exclusive=True)

    async def _analyze(self) -> None:
        status = self.query_one("#risk-status", Static)
        status.update("Analyzing execution logic...")
        client = self._client or LLMClient(config_manager=self.app.config_manager)
        try:
            result = await analyze_transaction_risk(
                RiskAnalysisInput(execution_logic=self.execution_logic),
                client=client,
            )
        except Exception as e:
            logger.error("Risk analysis failed: %s", e)
            status.update("[red]Risk analysis failed.[/red] Press [bold]r[/bold] to retry.")
            self.notify(
                "An unexpected error occurred during risk analysis.",
                title="Risk Analysis Failed",
                severity="error",
            )
            return
        self.show_result(result)

    def show_result(self, result: RiskAnalysis) -> None:
        self.result = result
        verdict = "[bold green]✔ Viable[/]" if result.is_viable else "[bold red]✘ Not Viable[/]"
        self.query_one("#risk-status", Static).update(
            f"[bold]Viability:[/bold] {verdict}    "
            f"[bold]Risk score:[/bold] {risk_score_markup(result.risk_score)}"
        )
        self.query_one("#risk-pnl", PnLChart).update_points(result.pnl_data, self.asset)

        table = self.query_one("#risk-breakdown", DataTable)
        table.clear()
        for item in result.risk_breakdown:
            table.add_row(item.risk, item.description)

        self.query_one("#risk-rationale", Static).update(result.rationale)

    def action_go_back(self) -> None:
        self.app.pop_screen()
