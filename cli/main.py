"""
Scripted CLI for FlashFlow.

Each command mirrors one step of the builder: generate execution logic,
simulate (viability assessment), detailed risk report, or the full
generate -> simulate -> execute pipeline. Output is Rich tables and panels,
or JSON when requested.
"""

import json
import logging
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from core.blockchain_simulator import execute_transaction
from core.config_manager import ConfigManager
from core.flows import analyze_transaction_risk
from core.llm_client import LLMClient
from core.llm_usage_tracker import LLMUsageTracker
from core.loan_builder import FlashLoanBuilder
from core.models import (
    ExecutionLogicOutput,
    RiskAnalysis,
    RiskAnalysisInput,
    TransactionInput,
    ViabilityAssessment,
    format_profit,
)
from core.transaction_manager import Transaction, TransactionManager, TransactionStatus

logger = logging.getLogger(__name__)


class FlashFlowCLI:
    """Runs builder steps from the command line and renders the results."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        console: Optional[Console] = None,
        client: Optional[LLMClient] = None,
        json_output: bool = False,
    ):
        self.version = "1.0.0"
        self.config_manager = config_manager or ConfigManager()
        self.console = console or Console()
        self.client = client or LLMClient(config_manager=self.config_manager)
        self.json_output = json_output

    def show_version(self) -> None:
        self.console.print(f"FlashFlow v{self.version}")

    def _emit_json(self, payload: Dict[str, Any]) -> None:
        self.console.print_json(json.dumps(payload, default=str))

    def _builder(self, asset: str, amount: float, strategy: str = "", execution_logic: str = "") -> FlashLoanBuilder:
        builder = FlashLoanBuilder(client=self.client, default_amount=float(amount))
        builder.set_asset(asset)
        builder.set_amount(amount)
        if strategy:
            builder.set_strategy(strategy)
        if execution_logic:
            builder.set_execution_logic(execution_logic)
        return builder

    # ── Commands ──────────────────────────────────────────────────

    async def generate(self, asset: str, amount: float, strategy: str = "") -> ExecutionLogicOutput:
        """Generate execution logic; an empty strategy uses the default arbitrage text."""
        builder = self._builder(asset, amount, strategy)
        logic = await builder.generate_logic()
        output = ExecutionLogicOutput(execution_logic=logic)

        if self.json_output:
            self._emit_json(output.model_dump(by_alias=True))
        else:
            self.console.print(Panel(Text(builder.strategy), title="Strategy", border_style="cyan"))
            self._print_logic(logic)
            self.show_cost_summary()
        return output

    async def simulate(self, asset: str, amount: float, execution_logic: str) -> ViabilityAssessment:
        """Validate the form values and run the viability assessment."""
        builder = self._builder(asset, amount, execution_logic=execution_logic)
        result = await builder.simulate()

        if self.json_output:
            self._emit_json(result.model_dump(by_alias=True))
        else:
            self.print_viability(result, asset)
            self.show_cost_summary()
        return result

    async def risk(self, execution_logic: str, asset: str = "") -> RiskAnalysis:
        """Run the detailed risk analysis on a piece of execution logic."""
        result = await analyze_transaction_risk(
            RiskAnalysisInput(execution_logic=execution_logic),
            client=self.client,
        )

        if self.json_output:
            self._emit_json(result.model_dump(by_alias=True))
        else:
            self.print_risk(result, asset)
            self.show_cost_summary()
        return result

    async def run(self, asset: str, amount: float, strategy: str = "", execute: bool = False) -> int:
        """Generate, simulate and optionally execute. Returns a process exit code."""
        builder = self._builder(asset, amount, strategy)
        logic = await builder.generate_logic()
        result = await builder.simulate()

        payload: Dict[str, Any] = {
            "asset": builder.asset,
            "amount": builder.amount,
            "strategy": builder.strategy,
            "executionLogic": logic,
            "simulation": result.model_dump(by_alias=True),
        }

        if not self.json_output:
            self.console.print(Panel(Text(builder.strategy), title="Strategy", border_style="cyan"))
            self._print_logic(logic)
            self.print_viability(result, builder.asset)

        exit_code = 0
        if execute:
            if not builder.can_execute:
                exit_code = 1
                payload["transaction"] = None
                if not self.json_output:
                    self.console.print("[bold red]Execution Failed:[/bold red] Cannot execute a non-viable transaction.")
            else:
                order = builder.execute()
                tx = await self.execute_order(
                    order.asset, order.amount, order.execution_logic, order.is_viable, llm_cost=order.llm_cost
                )
                payload["transaction"] = self._transaction_dict(tx)
                if not self.json_output:
                    self.print_transaction(tx)

        if self.json_output:
            self._emit_json(payload)
        else:
            self.show_cost_summary()
        return exit_code

    async def execute_order(
        self,
        asset: str,
        amount: float,
        execution_logic: str,
        is_viable: bool = True,
        llm_cost: float = 0.0,
    ) -> Transaction:
        """Record a transaction and run the placeholder executor in the foreground."""
        tm = TransactionManager.get_instance()
        tx = tm.create_transaction(
            asset=asset, amount=amount, execution_logic=execution_logic, llm_cost=llm_cost
        )
        tm.start(tx.id)
        if not self.json_output:
            self.console.print(f"[cyan]Transaction Initiated:[/cyan] {tx.id} sent to the network...")

        outcome = await execute_transaction(
            TransactionInput(execution_logic=execution_logic, is_viable=is_viable),
            delay=self.config_manager.config.simulator_delay,
        )
        if outcome.success:
            tm.complete(tx.id, outcome.profit)
        else:
            tm.fail(tx.id, outcome.error or "Unknown error")
        return tx

    # ── Rendering ─────────────────────────────────────────────────

    def _print_logic(self, logic: str) -> None:
        self.console.print(
            Panel(Syntax(logic, "solidity", word_wrap=True), title="Execution Logic", border_style="blue")
        )

    def print_viability(self, result: ViabilityAssessment, asset: str = "") -> None:
        badge = "[bold green]Viable[/bold green]" if result.is_viable else "[bold red]Not Viable[/bold red]"
        self.console.print(f"\n[bold]Viability Status:[/bold] {badge}")

        table = Table(title="Simulated P&L")
        table.add_column("Time", justify="right", style="cyan")
        table.add_column("Profit", justify="right")
        for point in result.profit_and_loss_data:
            style = "green" if point.profit > 0 else ("red" if point.profit < 0 else "")
            table.add_row(f"T+{point.time:g}", Text(format_profit(point.profit, asset), style=style))
        self.console.print(table)

        self.console.print(Panel(Text(result.risk_assessment), title="Risk Assessment", border_style="yellow"))
        self.console.print(Panel(Text(result.feedback), title="Feedback & Recommendations", border_style="green"))

    def print_risk(self, result: RiskAnalysis, asset: str = "") -> None:
        badge = "[bold green]Viable[/bold green]" if result.is_viable else "[bold red]Not Viable[/bold red]"
        self.console.print(f"\n[bold]Viability:[/bold] {badge}   [bold]Risk score:[/bold] {result.risk_score:g}/10")

        table = Table(title="Risk Breakdown")
        table.add_column("Risk", style="bold")
        table.add_column("Description")
        for item in result.risk_breakdown:
            table.add_row(item.risk, item.description)
        self.console.print(table)

        pnl = ", ".join(format_profit(p.profit, asset) for p in result.pnl_data)
        self.console.print(f"[bold]P&L:[/bold] {pnl}")
        self.console.print(Panel(Text(result.rationale), title="Rationale", border_style="cyan"))

    def print_transaction(self, tx: Transaction) -> None:
        if tx.status == TransactionStatus.COMPLETED:
            self.console.print(
                f"[bold green]Completed[/bold green] {tx.id}: +{format_profit(tx.profit or 0.0, tx.asset)}"
            )
        else:
            self.console.print(f"[bold red]Failed[/bold red] {tx.id}: {tx.error}")

    @staticmethod
    def _transaction_dict(tx: Transaction) -> Dict[str, Any]:
        return {
            "id": tx.id,
            "asset": tx.asset,
            "amount": tx.amount,
            "status": tx.status.value,
            "timestamp": tx.timestamp.isoformat(),
            "profit": tx.profit,
            "error": tx.error,
            "llm_cost": tx.llm_cost,
        }

    def show_cost_summary(self) -> None:
        summary = LLMUsageTracker.get_instance().get_summary()
        if not summary["total_calls"]:
            return
        self.console.print(
            f"[dim]LLM usage: {summary['total_calls']} call(s), "
            f"{summary['total_tokens']} tokens, ${summary['total_cost_usd']:.4f}[/dim]"
        )
