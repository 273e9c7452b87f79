"""
Flash loan builder screen.

Asset and amount fields, a natural-language strategy, AI generation of the
execution logic, and a "Simulate Transaction" step that shows the viability
assessment. A viable result can be executed, which hands the loan to
ExecutionRunner and returns to the dashboard.
"""

from __future__ import annotations

import logging
from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label, Select, Static, TextArea

from core.errors import FormValidationError, NotViableError
from core.llm_client import LLMClient
from core.loan_builder import FlashLoanBuilder
from core.models import SUPPORTED_ASSETS
from core.transaction_manager import TransactionManager
from cli.tui.widgets.simulation_result import SimulationResultPanel

logger = logging.getLogger(__name__)

_FORM_FIELDS = ("asset", "amount", "execution_logic")

GENERATE_LABEL = "Generate Execution Logic with AI"
SIMULATE_LABEL = "Simulate Transaction"


class BuilderScreen(Screen):
    """Construct and simulate a flash loan transaction.

    Args:
        builder: Form controller to drive; one is created from the app's
            configuration when omitted.
    """

    BINDINGS = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("ctrl+g", "generate", "Generate", show=True),
        Binding("ctrl+t", "simulate", "Simulate", show=True),
    ]

    CSS = """
    BuilderScreen #builder-form {
        padding: 0 2;
    }

    BuilderScreen #builder-subtitle {
        color: $text-muted;
        margin-bottom: 1;
    }

    BuilderScreen #asset-amount-row {
        height: auto;
    }

    BuilderScreen #asset-amount-row > Vertical {
        width: 1fr;
        height: auto;
        margin-right: 1;
    }

    BuilderScreen .field-label {
        text-style: bold;
        margin-top: 1;
    }

    BuilderScreen .field-error {
        color: $error;
        height: auto;
    }

    BuilderScreen #strategy {
        height: 5;
    }

    BuilderScreen #execution-logic {
        height: 12;
    }

    BuilderScreen #generate-btn {
        margin-top: 1;
    }

    BuilderScreen #simulate-btn {
        width: 100%;
        margin-top: 1;
    }
    """

    def __init__(self, builder: Optional[FlashLoanBuilder] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._builder = builder

    @property
    def builder(self) -> FlashLoanBuilder:
        if self._builder is None:
            config_manager = self.app.config_manager
            self._builder = FlashLoanBuilder(
                client=LLMClient(config_manager=config_manager),
                default_amount=float(config_manager.config.default_amount),
            )
        return self._builder

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="builder-form"):
            yield Static("[bold cyan]Flash Loan Builder[/bold cyan]", id="builder-title")
            yield Static("Construct and simulate your flash loan transaction.", id="builder-subtitle")

            with Horizontal(id="asset-amount-row"):
                with Vertical():
                    yield Label("Asset", classes="field-label")
                    yield Select(
                        [(label, symbol) for symbol, label in SUPPORTED_ASSETS.items()],
                        prompt="Select an asset",
                        id="asset",
                    )
                    yield Static("", id="asset-error", classes="field-error")
                with Vertical():
                    yield Label("Amount", classes="field-label")
                    yield Input(placeholder="e.g., 1000", type="number", id="amount")
                    yield Static("", id="amount-error", classes="field-error")

            yield Label("Strategy", classes="field-label")
            yield TextArea(id="strategy")
            yield Button(GENERATE_LABEL, id="generate-btn")

            yield Label("Execution Logic", classes="field-label")
            yield TextArea(id="execution-logic", language=None, show_line_numbers=True)
            yield Static("", id="execution-logic-error", classes="field-error")

            yield Button(SIMULATE_LABEL, variant="primary", id="simulate-btn")
            yield SimulationResultPanel(id="simulation-result")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "New Flash Loan"
        self._load_form()
        self._sync_busy()

    # ── Form <-> builder ──────────────────────────────────────────

    def _load_form(self) -> None:
        """Copy builder values into the widgets."""
        b = self.builder
        select = self.query_one("#asset", Select)
        if b.asset in SUPPORTED_ASSETS:
            select.value = b.asset
        else:
            select.clear()
        amount = float(b.amount or 0)
        self.query_one("#amount", Input).value = str(int(amount)) if amount.is_integer() else str(amount)
        self.query_one("#strategy", TextArea).load_text(b.strategy)
        self.query_one("#execution-logic", TextArea).load_text(b.execution_logic)
        self._show_field_errors({})

    def _refresh_strategy(self) -> None:
        area = self.query_one("#strategy", TextArea)
        if area.text != self.builder.strategy:
            area.load_text(self.builder.strategy)

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "asset":
            value = event.value if isinstance(event.value, str) else ""
            self.builder.set_asset(value)
            self._refresh_strategy()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "amount":
            self.builder.set_amount(event.value)
            self._refresh_strategy()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id == "strategy":
            self.builder.set_strategy(event.text_area.text)
        elif event.text_area.id == "execution-logic":
            self.builder.set_execution_logic(event.text_area.text)

    def _show_field_errors(self, errors: dict) -> None:
        for field in _FORM_FIELDS:
            widget = self.query_one(f"#{field.replace('_', '-')}-error", Static)
            widget.update(errors.get(field, ""))

    def _sync_busy(self) -> None:
        """Disable both actions while either call is running."""
        b = self.builder
        generate = self.query_one("#generate-btn", Button)
        simulate = self.query_one("#simulate-btn", Button)
        generate.disabled = b.is_busy
        simulate.disabled = b.is_busy
        generate.label = "Generating..." if b.is_generating else GENERATE_LABEL
        simulate.label = "Simulating..." if b.is_simulating else SIMULATE_LABEL

    # ── Buttons ───────────────────────────────────────────────────

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "generate-btn":
            self.action_generate()
        elif button_id == "simulate-btn":
            self.action_simulate()
        elif button_id == "clear-btn":
            self._clear()
        elif button_id == "execute-btn":
            self._execute()
        elif button_id == "risk-btn":
            self._open_risk_report()

    def action_generate(self) -> None:
        if self.builder.is_busy:
            return
        self.run_worker(self._generate(), exclusive=True, group="builder")

    def action_simulate(self) -> None:
        if self.builder.is_busy:
            return
        self.run_worker(self._simulate(), exclusive=True, group="builder")

    async def _generate(self) -> None:
        b = self.builder
        b.is_generating = True
        self._sync_busy()
        try:
            logic = await b.generate_logic()
        except FormValidationError as e:
            self.notify(
                e.field_errors.get("strategy", str(e)),
                title=e.title,
                severity="error",
            )
            return
        except Exception as e:
            logger.error("Logic generation failed: %s", e)
            self.notify(
                "An unexpected error occurred while generating the logic.",
                title="Generation Failed",
                severity="error",
            )
            return
        finally:
            b.is_generating = False
            self._sync_busy()

        self.query_one("#execution-logic", TextArea).load_text(logic)
        self._show_field_errors({})

    async def _simulate(self) -> None:
        b = self.builder
        panel = self.query_one("#simulation-result", SimulationResultPanel)
        self._show_field_errors({})
        try:
            b.validate()
        except FormValidationError as e:
            self._show_field_errors(e.field_errors)
            return

        panel.clear_result()
        b.is_simulating = True
        self._sync_busy()
        try:
            result = await b.simulate()
        except FormValidationError as e:
            self._show_field_errors(e.field_errors)
            return
        except Exception as e:
            logger.error("Simulation failed: %s", e)
            self.notify(
                "An unexpected error occurred during simulation.",
                title="Simulation Failed",
                severity="error",
            )
            return
        finally:
            b.is_simulating = False
            self._sync_busy()

        panel.show_result(result, b.asset)

    def _execute(self) -> None:
        try:
            order = self.builder.execute()
        except NotViableError as e:
            self.notify(str(e), title="Execution Failed", severity="error")
            return

        tx = TransactionManager.get_instance().create_transaction(
            asset=order.asset,
            amount=order.amount,
            execution_logic=order.execution_logic,
            llm_cost=order.llm_cost,
        )
        self.app.execution_runner.start_execution(tx.id, is_viable=order.is_viable)
        self.notify("Your flash loan has been sent to the network.", title="Transaction Initiated")
        self.app.pop_screen()

    def _clear(self) -> None:
        self.builder.clear()
        self.query_one("#simulation-result", SimulationResultPanel).clear_result()
        self._load_form()

    def _open_risk_report(self) -> None:
        from cli.tui.screens.risk_report import RiskReportScreen

        b = self.builder
        self.app.push_screen(
            RiskReportScreen(
                execution_logic=b.execution_logic,
                asset=b.asset,
                client=b.client,
            )
        )

    # ── Bindings ──────────────────────────────────────────────────

    def action_go_back(self) -> None:
        self.app.pop_screen()
