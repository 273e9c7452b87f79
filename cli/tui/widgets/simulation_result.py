"""
Simulation result panel for the builder screen.

Shows the viability badge, the P&L chart, the risk assessment and the
feedback from the last viability check, with Clear / Execute Loan /
Risk Report buttons. Button presses bubble up to the owning screen.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Label, Static

from core.models import ViabilityAssessment
from cli.tui.widgets.pnl_chart import PnLChart


class SimulationResultPanel(Vertical):
    """Result of the last 'Simulate Transaction' call; hidden until there is one."""

    DEFAULT_CSS = """
    SimulationResultPanel {
        height: auto;
        border: tall $border;
        border-title-color: cyan;
        border-title-style: bold;
        padding: 0 1;
        margin-top: 1;
    }

    SimulationResultPanel .result-heading {
        text-style: bold;
        color: $accent;
        margin-top: 1;
    }

    SimulationResultPanel #result-buttons {
        height: auto;
        margin-top: 1;
    }

    SimulationResultPanel #result-buttons Button {
        margin-right: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(id="viability-badge")
        yield PnLChart(id="pnl-chart")
        yield Label("Risk Assessment", classes="result-heading")
        yield Static(id="risk-assessment", markup=False)
        yield Label("Feedback & Recommendations", classes="result-heading")
        yield Static(id="feedback", markup=False)
        with Horizontal(id="result-buttons"):
            yield Button("Clear", id="clear-btn")
            yield Button("Execute Loan", variant="success", id="execute-btn")
            yield Button("Risk Report", variant="primary", id="risk-btn")

    def on_mount(self) -> None:
        self.border_title = "Simulation Result"
        self.display = False

    def show_result(self, result: ViabilityAssessment, asset: str = "") -> None:
        if result.is_viable:
            badge = "[bold]Viability Status:[/]  [bold green]✔ Viable[/]"
        else:
            badge = "[bold]Viability Status:[/]  [bold red]✘ Not Viable[/]"
        self.query_one("#viability-badge", Static).update(badge)
        self.query_one("#pnl-chart", PnLChart).update_points(result.profit_and_loss_data, asset)
        self.query_one("#risk-assessment", Static).update(result.risk_assessment)
        self.query_one("#feedback", Static).update(result.feedback)
        self.query_one("#execute-btn", Button).disabled = not result.is_viable
        self.display = True

    def clear_result(self) -> None:
        self.display = False
        self.query_one("#execute-btn", Button).disabled = True
